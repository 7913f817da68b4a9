"""In-memory conversation backend.

Simple dict-based storage for session-only persistence.
Data is lost when the application exits.
"""

from ..reasoning.models import TimelineTag
from .base import ConversationMemory
from .models import Conversation, MessageRecord, StoredRole


class InMemoryConversationMemory(ConversationMemory):
    """In-memory conversation store (session-only).

    Data is stored in memory and lost when the app exits.
    Suitable for single-session use or testing.
    """

    def __init__(self):
        self._conversations: dict[str, Conversation] = {}
        self._messages: dict[str, list[MessageRecord]] = {}

    async def connect(self) -> None:
        """Initialize memory (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close memory (no-op for in-memory)."""
        pass

    def _require(self, conversation_id: str) -> Conversation:
        try:
            return self._conversations[conversation_id]
        except KeyError:
            raise KeyError(f"Conversation not found: {conversation_id}") from None

    async def create_conversation(self, title: str, model: str) -> Conversation:
        conversation = Conversation(title=title, model=model)
        self._conversations[conversation.id] = conversation
        self._messages[conversation.id] = []
        return conversation.model_copy()

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        conversation = self._conversations.get(conversation_id)
        return conversation.model_copy() if conversation else None

    async def list_conversations(self, limit: int | None = None) -> list[Conversation]:
        ordered = sorted(
            self._conversations.values(),
            key=lambda c: c.last_message_at,
            reverse=True,
        )
        return [c.model_copy() for c in ordered[:limit]]

    async def delete_conversation(self, conversation_id: str) -> bool:
        self._messages.pop(conversation_id, None)
        return self._conversations.pop(conversation_id, None) is not None

    async def update_title(self, conversation_id: str, title: str) -> None:
        conversation = self._require(conversation_id)
        conversation.title = title
        conversation.touch()

    async def add_message(
        self,
        conversation_id: str,
        role: StoredRole,
        content: str,
        model: str | None = None,
        is_breakthrough: bool = False,
        timeline_event: TimelineTag | None = None,
    ) -> MessageRecord:
        conversation = self._require(conversation_id)
        record = MessageRecord(
            conversation_id=conversation_id,
            role=role,
            content=content,
            model=model,
            is_breakthrough=is_breakthrough,
            timeline_event=timeline_event,
        )
        self._messages[conversation_id].append(record)
        conversation.touch(record.created_at, message_added=True)
        return record

    async def list_messages(self, conversation_id: str) -> list[MessageRecord]:
        return list(self._messages.get(conversation_id, []))

    @property
    def backend_type(self) -> str:
        return "memory"
