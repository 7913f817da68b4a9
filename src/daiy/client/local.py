"""In-process counterpart of :class:`~daiy.client.http.ChatClient`.

Runs the orchestrator directly instead of going through HTTP, so the
reasoning lines still appear as they are produced.
"""

import logging
from collections.abc import Mapping, Sequence

from ..config import Settings
from ..errors import DaiyError
from ..llm.adapter import ChatBackend, ProviderAdapter
from ..llm.models import ChatMessage
from ..reasoning.orchestrator import prepare_turn
from ..reasoning.pacing import Clock
from ..turns import TurnOutcome, error_turn
from .http import StateCallback, collect_turn

logger = logging.getLogger(__name__)


class LocalChatClient:
    """Runs turns in this process with the same contract as the HTTP client."""

    def __init__(
        self,
        settings: Settings | None = None,
        backend: ChatBackend | None = None,
        clock: Clock | None = None,
    ):
        self.settings = settings or Settings.from_env()
        self._backend = backend or ProviderAdapter()
        self._clock = clock

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "LocalChatClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def send(
        self,
        messages: Sequence[ChatMessage],
        model: str | None = None,
        api_keys: Mapping[str, str | None] | None = None,
        extended: bool = False,
        on_state: StateCallback | None = None,
    ) -> TurnOutcome:
        try:
            orchestrator = prepare_turn(
                self.settings,
                self._backend,
                messages,
                model=model,
                api_keys=api_keys,
                extended=extended,
                clock=self._clock,
            )
        except DaiyError as exc:
            logger.info("Turn rejected: %s", exc.message)
            return error_turn(exc.message)

        return await collect_turn(orchestrator.run(messages), on_state)
