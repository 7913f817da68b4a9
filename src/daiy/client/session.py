"""A conversation held against the server, with optional persistence."""

import logging
from collections.abc import Mapping

from ..llm.models import ChatMessage
from ..memory.base import ConversationMemory
from ..turns import TurnOutcome
from ..utils import generate_title
from .http import ChatClient, StateCallback
from .local import LocalChatClient

logger = logging.getLogger(__name__)


class ChatSession:
    """Keeps the history of one conversation and runs its turns.

    The first user message creates the stored conversation and gives it a
    title. Finalised assistant turns are stored with their breakthrough
    flag and timeline event; error turns are shown but neither stored nor
    sent back to the server as history.

    Args:
        client: HTTP or in-process client
        model: Model id for every turn (server default when omitted)
        api_keys: Per-provider keys forwarded with every request
        extended: Use the three-pass reasoning pipeline
        memory: Optional store for the conversation
    """

    def __init__(
        self,
        client: ChatClient | LocalChatClient,
        model: str | None = None,
        api_keys: Mapping[str, str | None] | None = None,
        extended: bool = False,
        memory: ConversationMemory | None = None,
    ):
        self.client = client
        self.model = model
        self.api_keys = dict(api_keys or {})
        self.extended = extended
        self.memory = memory
        self.conversation_id: str | None = None
        self._history: list[ChatMessage] = []
        self._transcript: list[ChatMessage] = []

    @property
    def history(self) -> list[ChatMessage]:
        """Messages sent to the server as context."""
        return list(self._history)

    @property
    def transcript(self) -> list[ChatMessage]:
        """Everything shown to the user, error turns included."""
        return list(self._transcript)

    async def ask(self, text: str, on_state: StateCallback | None = None) -> TurnOutcome:
        """Send a user message and return the assistant's finalised turn."""
        user_message = ChatMessage(role="user", content=text)
        self._transcript.append(user_message)
        await self._store_user_message(text)

        outcome = await self.client.send(
            [*self._history, user_message],
            model=self.model,
            api_keys=self.api_keys,
            extended=self.extended,
            on_state=on_state,
        )
        self._transcript.append(outcome.to_message())

        if outcome.is_error:
            return outcome

        self._history.extend([user_message, outcome.to_message()])
        if self.memory is not None and self.conversation_id is not None:
            await self.memory.add_message(
                self.conversation_id,
                "assistant",
                outcome.content,
                model=self.model,
                is_breakthrough=outcome.is_breakthrough,
                timeline_event=outcome.timeline_event,
            )
        return outcome

    async def _store_user_message(self, text: str) -> None:
        if self.memory is None:
            return
        if self.conversation_id is None:
            conversation = await self.memory.create_conversation(
                title=generate_title(text),
                model=self.model or "",
            )
            self.conversation_id = conversation.id
            logger.debug("Created conversation %s", conversation.id)
        await self.memory.add_message(self.conversation_id, "user", text)
