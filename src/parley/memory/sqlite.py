"""SQLite chat history backend.

Provides persistent chat session storage using a SQLite database.
Uses aiosqlite for async access.
"""

import json
from datetime import datetime
from pathlib import Path
from uuid import UUID

import aiosqlite

from ..conversation import ChatMessage
from .base import ChatHistoryStore
from .models import ChatSession, ChatSessionItem


class SQLiteChatHistoryStore(ChatHistoryStore):
    """SQLite-backed chat history.

    Stores one row per chat session; messages are kept as a JSON array in
    conversational order.
    """

    def __init__(self, path: str | Path = "./parley_history.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLite history store is not connected. Call connect() first.")
        return self._connection

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        if self._connection is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS chat_sessions (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                title TEXT NOT NULL,
                conversation_id TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                messages TEXT NOT NULL DEFAULT '[]'
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_chat_sessions_user
            ON chat_sessions(user_id, updated_at)
        """)

        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def get_session(self, session_id: UUID) -> ChatSession | None:
        conn = self._require_connection()
        async with conn.execute(
            """
            SELECT id, user_id, title, conversation_id, updated_at, messages
            FROM chat_sessions
            WHERE id = ?
            """,
            (str(session_id),)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None

        sid, user_id, title, conversation_id, updated_at, messages_json = row
        return ChatSession(
            id=UUID(sid),
            user_id=user_id,
            title=title,
            conversation_id=conversation_id,
            updated_at=datetime.fromisoformat(updated_at),
            messages=[ChatMessage.model_validate(m) for m in json.loads(messages_json)],
        )

    async def save_session(self, session: ChatSession) -> None:
        conn = self._require_connection()
        messages_json = json.dumps([m.model_dump(mode="json") for m in session.messages])

        await conn.execute("""
            INSERT INTO chat_sessions (id, user_id, title, conversation_id, updated_at, messages)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                user_id = excluded.user_id,
                title = excluded.title,
                conversation_id = excluded.conversation_id,
                updated_at = excluded.updated_at,
                messages = excluded.messages
        """, (
            str(session.id),
            session.user_id,
            session.title,
            session.conversation_id,
            session.updated_at.isoformat(),
            messages_json,
        ))
        await conn.commit()

    async def list_sessions(
        self,
        user_id: str | None = None,
        limit: int = 50
    ) -> list[ChatSessionItem]:
        conn = self._require_connection()
        query = "SELECT id, title, updated_at FROM chat_sessions"
        params: tuple = ()
        if user_id is not None:
            query += " WHERE user_id = ?"
            params = (user_id,)
        query += " ORDER BY updated_at DESC LIMIT ?"

        async with conn.execute(query, (*params, limit)) as cursor:
            rows = await cursor.fetchall()

        return [
            ChatSessionItem(id=UUID(sid), title=title, updated_at=datetime.fromisoformat(updated_at))
            for sid, title, updated_at in rows
        ]

    async def delete_session(self, session_id: UUID) -> bool:
        conn = self._require_connection()
        cursor = await conn.execute(
            "DELETE FROM chat_sessions WHERE id = ?",
            (str(session_id),)
        )
        await conn.commit()
        return cursor.rowcount > 0

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
