"""Abstract base class for conversation persistence backends.

This module defines the interface for conversation storage.
The abstraction hides:
- Storage format (rows, in-process objects)
- Persistence mechanism (database file, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod

from ..reasoning.models import TimelineTag
from .models import Conversation, MessageRecord, StoredRole


class ConversationMemory(ABC):
    """Abstract conversation store.

    Provides a unified interface for storing and retrieving
    conversations and their messages across different backends.
    Backends are async context managers: entering connects, leaving
    disconnects.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the backend gracefully."""

    @abstractmethod
    async def create_conversation(self, title: str, model: str) -> Conversation:
        """Create and store a new, empty conversation."""

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        """Fetch a conversation, or ``None`` if it does not exist."""

    @abstractmethod
    async def list_conversations(self, limit: int | None = None) -> list[Conversation]:
        """List conversations, most recently active first."""

    @abstractmethod
    async def delete_conversation(self, conversation_id: str) -> bool:
        """Delete a conversation and its messages.

        Returns:
            True if the conversation existed
        """

    @abstractmethod
    async def update_title(self, conversation_id: str, title: str) -> None:
        """Rename a conversation.

        Raises:
            KeyError: If the conversation does not exist
        """

    @abstractmethod
    async def add_message(
        self,
        conversation_id: str,
        role: StoredRole,
        content: str,
        model: str | None = None,
        is_breakthrough: bool = False,
        timeline_event: TimelineTag | None = None,
    ) -> MessageRecord:
        """Append a message and update the conversation's activity.

        Raises:
            KeyError: If the conversation does not exist
        """

    @abstractmethod
    async def list_messages(self, conversation_id: str) -> list[MessageRecord]:
        """Messages of a conversation in creation order."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "ConversationMemory":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
