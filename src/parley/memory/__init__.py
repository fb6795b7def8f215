"""Chat history module for parley.

Provides persistent chat session storage so conversations can be resumed.
"""

from .base import ChatHistoryStore
from .factory import create_chat_history_store
from .in_memory import InMemoryChatHistoryStore
from .models import ChatSession, ChatSessionItem
from .sqlite import SQLiteChatHistoryStore

__all__ = [
    "ChatHistoryStore",
    "ChatSession",
    "ChatSessionItem",
    "InMemoryChatHistoryStore",
    "SQLiteChatHistoryStore",
    "create_chat_history_store",
]
