from abc import ABC, abstractmethod
from typing import Any

from .models import ChatMessage, LLMResponse, StreamingResponse


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This module hides the design decision of which LLM backend serves a
    request. Implementations handle:
    - API client setup and authentication
    - Translation of the unified message shape to the backend schema
    - System instruction placement and role renaming

    Providers are short-lived: one instance per call, closed when the call
    finishes.

        async with provider:
            response = await provider.chat_completion(messages)
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Default model name for this provider instance."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.8,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion.

        Args:
            messages: Conversation history in the unified shape
            model: Model to use (None uses provider's default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Provider-specific parameters

        Returns:
            LLMResponse containing generated content and metadata
        """

    @abstractmethod
    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Generate a streaming chat completion.

        Returns:
            StreamingResponse that yields non-empty text chunks.
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise


def split_system_message(
    messages: list[ChatMessage],
    default_system: str,
) -> tuple[str, list[ChatMessage]]:
    """Separate the system instruction from the conversation turns.

    The first system message wins; later ones are dropped. When there is no
    system message, ``default_system`` is used.

    Returns:
        Tuple of (system_instruction, non-system messages in order)
    """
    system_instruction: str | None = None
    turns: list[ChatMessage] = []

    for msg in messages:
        if msg.role == "system":
            if system_instruction is None:
                system_instruction = msg.content
        else:
            turns.append(msg)

    return system_instruction or default_system, turns
