"""Abstract base class for chat history backends.

This module defines the interface for chat session storage.
The abstraction hides:
- Storage format (JSON, SQLite, etc.)
- Persistence mechanism (file, database, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID

from .models import ChatSession, ChatSessionItem


class ChatHistoryStore(ABC):
    """Abstract chat history backend.

    Provides a unified interface for storing and retrieving chat sessions
    across different storage backends.

    Supports the async context manager protocol:
        async with store:
            await store.save_session(session)
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the storage backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the storage backend gracefully."""

    @abstractmethod
    async def get_session(self, session_id: UUID) -> ChatSession | None:
        """Retrieve a chat session, or None if it does not exist."""

    @abstractmethod
    async def save_session(self, session: ChatSession) -> None:
        """Insert or replace a chat session."""

    @abstractmethod
    async def list_sessions(
        self,
        user_id: str | None = None,
        limit: int = 50
    ) -> list[ChatSessionItem]:
        """List session summaries, most recently updated first."""

    @abstractmethod
    async def delete_session(self, session_id: UUID) -> bool:
        """Delete a chat session.

        Returns:
            True if a session was deleted
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "ChatHistoryStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
