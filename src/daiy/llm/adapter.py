"""Uniform call contract over every provider.

``stream_chat`` and ``complete_chat`` take the provider name, the model id,
messages in the unified shape and the credential. Each call builds its own
short-lived provider through the factory and closes it afterwards, so no
client is shared between requests.
"""

import logging
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any, Protocol

from ..prompts import get_socratic_prompt
from .base import LLMProvider
from .factory import create_llm_provider
from .models import ChatMessage, ProviderName

logger = logging.getLogger(__name__)

ProviderFactory = Callable[..., LLMProvider]


class ChatBackend(Protocol):
    """What the orchestrator needs from the adapter."""

    def stream_chat(
        self,
        provider: ProviderName | str,
        model: str,
        messages: Sequence[ChatMessage],
        credential: str,
    ) -> AsyncIterator[str]:
        ...

    async def complete_chat(
        self,
        provider: ProviderName | str,
        model: str,
        messages: Sequence[ChatMessage],
        credential: str,
    ) -> str:
        ...


class ProviderAdapter:
    """Adapter implementing :class:`ChatBackend` on top of real providers.

    Args:
        provider_factory: Callable building a provider from
            ``(provider, api_key=..., model=..., default_system=...)``.
            Defaults to :func:`create_llm_provider`.
        default_system: Persona used when messages carry no system
            message. Defaults to the Socratic persona prompt.
    """

    def __init__(
        self,
        provider_factory: ProviderFactory | None = None,
        default_system: str | None = None,
    ):
        self._provider_factory = provider_factory or create_llm_provider
        self._default_system = default_system

    @property
    def default_system(self) -> str:
        if self._default_system is None:
            self._default_system = get_socratic_prompt()
        return self._default_system

    def _create(self, provider: ProviderName | str, model: str, credential: str) -> LLMProvider:
        return self._provider_factory(
            provider,
            api_key=credential,
            model=model,
            default_system=self.default_system,
        )

    async def stream_chat(
        self,
        provider: ProviderName | str,
        model: str,
        messages: Sequence[ChatMessage],
        credential: str,
        **kwargs: Any,
    ) -> AsyncIterator[str]:
        """Stream text fragments from the provider.

        Yields:
            Non-empty text fragments in arrival order. Backend failures
            propagate unchanged on the next iteration.
        """
        llm = self._create(provider, model, credential)
        async with llm:
            logger.debug("Streaming %s/%s with %d messages", provider, model, len(messages))
            stream = await llm.chat_completion_stream(list(messages), model=model, **kwargs)
            async for chunk in stream:
                if chunk:
                    yield chunk

    async def complete_chat(
        self,
        provider: ProviderName | str,
        model: str,
        messages: Sequence[ChatMessage],
        credential: str,
        **kwargs: Any,
    ) -> str:
        """Run a non-streaming completion and return its full text."""
        llm = self._create(provider, model, credential)
        async with llm:
            logger.debug("Completing %s/%s with %d messages", provider, model, len(messages))
            response = await llm.chat_completion(list(messages), model=model, **kwargs)
        return response.content
