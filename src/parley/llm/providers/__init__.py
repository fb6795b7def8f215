from .anthropic import AnthropicChatService
from .gemini import GeminiChatService
from .openai import OpenAIChatService
from .server import JsonArrayStreamDecoder, ServerChatService

__all__ = [
    "AnthropicChatService",
    "GeminiChatService",
    "JsonArrayStreamDecoder",
    "OpenAIChatService",
    "ServerChatService",
]
