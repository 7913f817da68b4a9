"""Data models for conversation persistence.

These models define the stored shape of conversations and their messages,
independent of the storage backend used.
"""

from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from ..reasoning.models import TimelineTag

StoredRole = Literal["user", "assistant"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


class MessageRecord(BaseModel):
    """One stored chat message.

    Assistant messages carry the finalised turn: visible text only, the
    breakthrough flag and the canonical timeline event.
    """

    id: str = Field(default_factory=new_id)
    conversation_id: str
    role: StoredRole
    content: str
    is_breakthrough: bool = False
    timeline_event: TimelineTag | None = None
    model: str | None = Field(default=None, description="Model that produced an assistant message")
    created_at: datetime = Field(default_factory=utcnow)


class Conversation(BaseModel):
    """A titled conversation and its bookkeeping timestamps."""

    id: str = Field(default_factory=new_id)
    title: str
    model: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_message_at: datetime = Field(default_factory=utcnow)
    message_count: int = 0

    def touch(self, at: datetime | None = None, message_added: bool = False) -> None:
        """Record activity on the conversation.

        Args:
            at: Timestamp of the activity (now by default)
            message_added: Also bump ``last_message_at`` and the count
        """
        now = at or utcnow()
        self.updated_at = now
        if message_added:
            self.last_message_at = now
            self.message_count += 1
