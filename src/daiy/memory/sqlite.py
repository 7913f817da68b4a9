"""SQLite conversation backend.

Provides persistent conversation storage using a SQLite database.
Uses aiosqlite for async access.
"""

import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..reasoning.models import TimelineTag
from .base import ConversationMemory
from .models import Conversation, MessageRecord, StoredRole, utcnow

logger = logging.getLogger(__name__)

_CONVERSATION_COLUMNS = (
    "id, title, model, created_at, updated_at, last_message_at, message_count"
)
_MESSAGE_COLUMNS = (
    "id, conversation_id, role, content, is_breakthrough, timeline_event, model, created_at"
)


class SQLiteConversationMemory(ConversationMemory):
    """SQLite-backed conversation store.

    Stores conversations and messages in a SQLite database file.
    Supports persistent storage across sessions.
    """

    def __init__(self, path: str | Path = "./daiy_conversations.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("Not connected. Call connect() first.")
        return self._connection

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()
        logger.debug("Opened conversation store at %s", self._db_path)

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self.connection.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                model TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                last_message_at TEXT NOT NULL,
                message_count INTEGER NOT NULL DEFAULT 0
            )
        """)

        await self.connection.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                conversation_id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                is_breakthrough INTEGER NOT NULL DEFAULT 0,
                timeline_event TEXT,
                model TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
            )
        """)

        await self.connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_conversation
            ON messages(conversation_id, seq)
        """)

        await self.connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @staticmethod
    def _conversation_from_row(row) -> Conversation:
        id_, title, model, created_at, updated_at, last_message_at, message_count = row
        return Conversation(
            id=id_,
            title=title,
            model=model,
            created_at=datetime.fromisoformat(created_at),
            updated_at=datetime.fromisoformat(updated_at),
            last_message_at=datetime.fromisoformat(last_message_at),
            message_count=message_count,
        )

    @staticmethod
    def _message_from_row(row) -> MessageRecord:
        id_, conversation_id, role, content, is_breakthrough, timeline_event, model, created_at = row
        return MessageRecord(
            id=id_,
            conversation_id=conversation_id,
            role=role,
            content=content,
            is_breakthrough=bool(is_breakthrough),
            timeline_event=TimelineTag(timeline_event) if timeline_event else None,
            model=model,
            created_at=datetime.fromisoformat(created_at),
        )

    async def create_conversation(self, title: str, model: str) -> Conversation:
        conversation = Conversation(title=title, model=model)
        await self.connection.execute(
            f"INSERT INTO conversations ({_CONVERSATION_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                conversation.id,
                conversation.title,
                conversation.model,
                conversation.created_at.isoformat(),
                conversation.updated_at.isoformat(),
                conversation.last_message_at.isoformat(),
                conversation.message_count,
            ),
        )
        await self.connection.commit()
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        async with self.connection.execute(
            f"SELECT {_CONVERSATION_COLUMNS} FROM conversations WHERE id = ?",
            (conversation_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return self._conversation_from_row(row) if row else None

    async def list_conversations(self, limit: int | None = None) -> list[Conversation]:
        async with self.connection.execute(
            f"""
            SELECT {_CONVERSATION_COLUMNS}
            FROM conversations
            ORDER BY last_message_at DESC
            LIMIT ?
            """,
            (-1 if limit is None else limit,)
        ) as cursor:
            rows = await cursor.fetchall()
        return [self._conversation_from_row(row) for row in rows]

    async def delete_conversation(self, conversation_id: str) -> bool:
        cursor = await self.connection.execute(
            "DELETE FROM conversations WHERE id = ?",
            (conversation_id,)
        )
        await self.connection.commit()
        return cursor.rowcount > 0

    async def update_title(self, conversation_id: str, title: str) -> None:
        cursor = await self.connection.execute(
            "UPDATE conversations SET title = ?, updated_at = ? WHERE id = ?",
            (title, utcnow().isoformat(), conversation_id)
        )
        await self.connection.commit()
        if cursor.rowcount == 0:
            raise KeyError(f"Conversation not found: {conversation_id}")

    async def add_message(
        self,
        conversation_id: str,
        role: StoredRole,
        content: str,
        model: str | None = None,
        is_breakthrough: bool = False,
        timeline_event: TimelineTag | None = None,
    ) -> MessageRecord:
        record = MessageRecord(
            conversation_id=conversation_id,
            role=role,
            content=content,
            model=model,
            is_breakthrough=is_breakthrough,
            timeline_event=timeline_event,
        )
        now = record.created_at.isoformat()

        cursor = await self.connection.execute("""
            UPDATE conversations
            SET last_message_at = ?, updated_at = ?, message_count = message_count + 1
            WHERE id = ?
        """, (now, now, conversation_id))
        if cursor.rowcount == 0:
            await self.connection.rollback()
            raise KeyError(f"Conversation not found: {conversation_id}")

        await self.connection.execute(
            f"INSERT INTO messages ({_MESSAGE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record.id,
                record.conversation_id,
                record.role,
                record.content,
                int(record.is_breakthrough),
                record.timeline_event.value if record.timeline_event else None,
                record.model,
                now,
            ),
        )
        await self.connection.commit()
        return record

    async def list_messages(self, conversation_id: str) -> list[MessageRecord]:
        async with self.connection.execute(
            f"""
            SELECT {_MESSAGE_COLUMNS}
            FROM messages
            WHERE conversation_id = ?
            ORDER BY seq ASC
            """,
            (conversation_id,)
        ) as cursor:
            rows = await cursor.fetchall()
        return [self._message_from_row(row) for row in rows]

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
