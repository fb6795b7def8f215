from typing import Any

from .base import ChatService
from .providers import AnthropicChatService, GeminiChatService, OpenAIChatService, ServerChatService

SUPPORTED_PROVIDERS = ("server", "openai", "deepseek", "ollama", "anthropic", "gemini")


def create_chat_service(provider: str, **config: Any) -> ChatService:
    """Create a chat service instance.

    This factory function hides the instantiation logic for different backends.

    Args:
        provider: Backend type ('server', 'openai', 'deepseek', 'ollama',
            'anthropic', 'gemini')
        **config: Backend-specific configuration
            For server (the inference service):
                - base_url: str (default: 'http://localhost:5000/chat/completions')
                - timeout: float | None
            For OpenAI:
                - api_key: str (required)
                - model: str (default: 'gpt-4o')
                - base_url: str | None
            For DeepSeek:
                - api_key: str (required)
                - model: str (default: 'deepseek-reasoner')
                - base_url: str (default: 'https://api.deepseek.com')
            For Ollama:
                - model: str (default: 'llama3.1')
                - base_url: str (default: 'http://localhost:11434/v1')
            For Anthropic (Claude):
                - api_key: str (required)
                - model: str (default: 'claude-sonnet-4-20250514')
            For Gemini:
                - api_key: str (required)
                - model: str (default: 'gemini-2.5-flash')

    Returns:
        Initialized chat service instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> service = create_chat_service(
        ...     "server",
        ...     base_url="http://localhost:5000/chat/completions"
        ... )

        >>> service = create_chat_service(
        ...     "anthropic",
        ...     api_key="sk-ant-...",
        ...     model="claude-sonnet-4-20250514"
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower == "server":
        return ServerChatService(**config)

    if provider_lower == "openai":
        if "api_key" not in config:
            raise TypeError("OpenAI provider requires 'api_key' in config")
        return OpenAIChatService(**config)

    if provider_lower == "deepseek":
        if "api_key" not in config:
            raise TypeError("DeepSeek provider requires 'api_key' in config")
        config.setdefault("model", "deepseek-reasoner")
        config.setdefault("base_url", "https://api.deepseek.com")
        return OpenAIChatService(provider_name="deepseek", **config)

    if provider_lower == "ollama":
        # Ollama ignores the key but the OpenAI client insists on one
        config.setdefault("api_key", "ollama")
        config.setdefault("model", "llama3.1")
        config.setdefault("base_url", "http://localhost:11434/v1")
        return OpenAIChatService(provider_name="ollama", **config)

    if provider_lower in ("anthropic", "claude"):
        if "api_key" not in config:
            raise TypeError("Anthropic provider requires 'api_key' in config")
        return AnthropicChatService(**config)

    if provider_lower == "gemini":
        if "api_key" not in config:
            raise TypeError("Gemini provider requires 'api_key' in config")
        return GeminiChatService(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: {', '.join(repr(p) for p in SUPPORTED_PROVIDERS)}"
    )
