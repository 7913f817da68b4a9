"""Unit tests for conversation persistence backends."""
import pytest

from daiy.memory import ConversationMemory, InMemoryConversationMemory, create_conversation_memory
from daiy.memory.sqlite import SQLiteConversationMemory
from daiy.reasoning.models import TimelineTag


@pytest.fixture(params=["memory", "sqlite"])
def memory(request, tmp_path) -> ConversationMemory:
    """Return an unconnected backend of each type."""
    if request.param == "sqlite":
        return create_conversation_memory("sqlite", path=tmp_path / "conversations.db")
    return create_conversation_memory("memory")


class TestFactory:
    """Tests for create_conversation_memory."""

    def test_backend_types(self, tmp_path):
        """Test that each backend name maps to its class."""
        assert isinstance(create_conversation_memory("memory"), InMemoryConversationMemory)
        sqlite = create_conversation_memory("sqlite", path=tmp_path / "x.db")
        assert isinstance(sqlite, SQLiteConversationMemory)
        assert sqlite.backend_type == "sqlite"

    def test_unsupported_backend(self):
        """Test that an unknown backend name is rejected."""
        with pytest.raises(ValueError, match="Unsupported memory backend"):
            create_conversation_memory("redis")


class TestConversationMemory:
    """Behaviour shared by every backend."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, memory):
        """Test that a created conversation can be fetched back."""
        async with memory:
            created = await memory.create_conversation("Why is 1/0 undefined?", "llama-3.3-70b-versatile")
            fetched = await memory.get_conversation(created.id)

        assert fetched is not None
        assert fetched.title == "Why is 1/0 undefined?"
        assert fetched.model == "llama-3.3-70b-versatile"
        assert fetched.message_count == 0

    @pytest.mark.asyncio
    async def test_get_missing(self, memory):
        """Test that a missing conversation is None."""
        async with memory:
            assert await memory.get_conversation("nope") is None

    @pytest.mark.asyncio
    async def test_messages_in_order(self, memory):
        """Test that messages come back in the order they were added."""
        async with memory:
            conversation = await memory.create_conversation("t", "m")
            await memory.add_message(conversation.id, "user", "first")
            await memory.add_message(
                conversation.id,
                "assistant",
                "second",
                model="m",
                is_breakthrough=True,
                timeline_event=TimelineTag.BREAKTHROUGH,
            )
            messages = await memory.list_messages(conversation.id)
            updated = await memory.get_conversation(conversation.id)

        assert [m.content for m in messages] == ["first", "second"]
        assert messages[1].is_breakthrough is True
        assert messages[1].timeline_event == TimelineTag.BREAKTHROUGH
        assert messages[1].model == "m"
        assert messages[0].timeline_event is None
        assert updated.message_count == 2
        assert updated.last_message_at >= conversation.last_message_at

    @pytest.mark.asyncio
    async def test_add_message_to_missing_conversation(self, memory):
        """Test that messages need an existing conversation."""
        async with memory:
            with pytest.raises(KeyError):
                await memory.add_message("nope", "user", "hello")

    @pytest.mark.asyncio
    async def test_update_title(self, memory):
        """Test renaming a conversation."""
        async with memory:
            conversation = await memory.create_conversation("New Conversation", "m")
            await memory.update_title(conversation.id, "Fractions")
            fetched = await memory.get_conversation(conversation.id)

            with pytest.raises(KeyError):
                await memory.update_title("nope", "x")

        assert fetched.title == "Fractions"

    @pytest.mark.asyncio
    async def test_list_most_recent_first(self, memory):
        """Test that conversations are listed by latest activity."""
        async with memory:
            older = await memory.create_conversation("older", "m")
            newer = await memory.create_conversation("newer", "m")
            await memory.add_message(older.id, "user", "bump")

            listed = await memory.list_conversations()
            limited = await memory.list_conversations(limit=1)

        assert [c.id for c in listed] == [older.id, newer.id]
        assert [c.id for c in limited] == [older.id]

    @pytest.mark.asyncio
    async def test_delete(self, memory):
        """Test that deleting removes the conversation and its messages."""
        async with memory:
            conversation = await memory.create_conversation("t", "m")
            await memory.add_message(conversation.id, "user", "hello")

            assert await memory.delete_conversation(conversation.id) is True
            assert await memory.delete_conversation(conversation.id) is False
            assert await memory.get_conversation(conversation.id) is None
            assert await memory.list_messages(conversation.id) == []


class TestSQLitePersistence:
    """Tests specific to the SQLite backend."""

    @pytest.mark.asyncio
    async def test_survives_reconnect(self, tmp_path):
        """Test that data written before disconnect is read back later."""
        path = tmp_path / "conversations.db"

        async with SQLiteConversationMemory(path) as memory:
            conversation = await memory.create_conversation("persisted", "m")
            await memory.add_message(conversation.id, "user", "hello")

        async with SQLiteConversationMemory(path) as memory:
            fetched = await memory.get_conversation(conversation.id)
            messages = await memory.list_messages(conversation.id)

        assert fetched.title == "persisted"
        assert [m.content for m in messages] == ["hello"]

    def test_requires_connect(self, tmp_path):
        """Test that using the store before connect fails clearly."""
        memory = SQLiteConversationMemory(tmp_path / "x.db")

        with pytest.raises(RuntimeError, match="Not connected"):
            memory.connection
