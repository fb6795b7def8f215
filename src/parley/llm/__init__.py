"""Chat service module for parley.

Hides which backend answers a conversation: the inference service or a
third-party LLM API. Every backend produces the same fragment stream.
"""

from .base import ChatService, make_fragment, to_provider_messages
from .factory import SUPPORTED_PROVIDERS, create_chat_service
from .models import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_USER,
    THINK_LEVELS,
    ChatRequest,
    Conversation,
    ToolRequest,
)
from .providers import (
    AnthropicChatService,
    GeminiChatService,
    JsonArrayStreamDecoder,
    OpenAIChatService,
    ServerChatService,
)

__all__ = [
    "ChatService",
    "create_chat_service",
    "make_fragment",
    "to_provider_messages",
    "SUPPORTED_PROVIDERS",
    "ChatRequest",
    "Conversation",
    "ToolRequest",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_USER",
    "THINK_LEVELS",
    "AnthropicChatService",
    "GeminiChatService",
    "JsonArrayStreamDecoder",
    "OpenAIChatService",
    "ServerChatService",
]
