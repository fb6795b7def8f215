"""Factory for creating chat history backends."""

from typing import Any

from .base import ChatHistoryStore


def create_chat_history_store(
    backend: str = "memory",
    **kwargs: Any
) -> ChatHistoryStore:
    """Create a chat history backend.

    Args:
        backend: Backend type ("memory" or "sqlite")
        **kwargs: Backend-specific configuration
            For sqlite:
                - path: str | Path (default: './parley_history.db')

    Returns:
        ChatHistoryStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryChatHistoryStore
        return InMemoryChatHistoryStore(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteChatHistoryStore
        return SQLiteChatHistoryStore(**kwargs)

    raise ValueError(
        f"Unsupported history backend: {backend}. "
        f"Supported backends: memory, sqlite"
    )
