"""Data models for chat history.

These models define the structure of a stored chat session and its list
summary, independent of the storage backend used.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from ..conversation import ChatMessage, Role
from ..llm import DEFAULT_USER
from ..streaming import CLIENT_PLACEHOLDER_TITLE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatSessionItem(BaseModel):
    """Summary row for session lists."""

    id: UUID = Field(description="Chat session identifier")
    title: str = Field(description="Session title")
    updated_at: datetime = Field(description="Last modification time")


class ChatSession(BaseModel):
    """A stored chat session.

    The stored messages may include a system message; it is never restored
    verbatim; loading a session rebuilds it from the active agent.
    """

    id: UUID = Field(default_factory=uuid4)
    user_id: str = Field(default=DEFAULT_USER)
    title: str = Field(default=CLIENT_PLACEHOLDER_TITLE)
    updated_at: datetime = Field(default_factory=_utcnow)
    conversation_id: str = Field(default_factory=lambda: str(uuid4()))
    messages: list[ChatMessage] = Field(default_factory=list)

    def touch(self) -> None:
        """Mark the session as modified now."""
        self.updated_at = _utcnow()

    def conversation_messages(self) -> list[ChatMessage]:
        """Stored messages without any system message."""
        return [msg for msg in self.messages if msg.role is not Role.SYSTEM]

    def to_item(self) -> ChatSessionItem:
        return ChatSessionItem(id=self.id, title=self.title, updated_at=self.updated_at)
