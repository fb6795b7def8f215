"""In-memory chat history backend.

Simple dict-based storage for session-only history.
Data is lost when the application exits.
"""

from uuid import UUID

from .base import ChatHistoryStore
from .models import ChatSession, ChatSessionItem


class InMemoryChatHistoryStore(ChatHistoryStore):
    """In-memory chat history (session-only).

    Sessions are stored as deep copies so later mutation of a live session
    does not leak into the store until it is saved again.
    Suitable for single-session use or testing.
    """

    def __init__(self) -> None:
        self._sessions: dict[UUID, ChatSession] = {}

    async def connect(self) -> None:
        """Initialize storage (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close storage (no-op for in-memory)."""
        pass

    async def get_session(self, session_id: UUID) -> ChatSession | None:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    async def save_session(self, session: ChatSession) -> None:
        self._sessions[session.id] = session.model_copy(deep=True)

    async def list_sessions(
        self,
        user_id: str | None = None,
        limit: int = 50
    ) -> list[ChatSessionItem]:
        sessions = [
            s for s in self._sessions.values()
            if user_id is None or s.user_id == user_id
        ]
        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return [s.to_item() for s in sessions[:limit]]

    async def delete_session(self, session_id: UUID) -> bool:
        return self._sessions.pop(session_id, None) is not None

    @property
    def backend_type(self) -> str:
        return "memory"
