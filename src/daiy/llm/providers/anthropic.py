"""Anthropic Claude LLM provider implementation.

Uses the official Anthropic Python SDK for async chat completions.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from collections.abc import AsyncIterator
from typing import Any

from anthropic import AsyncAnthropic

from ..base import LLMProvider, split_system_message
from ..models import ChatMessage, LLMResponse, StreamingResponse

COMPLETION_MAX_TOKENS = 2048
STREAM_MAX_TOKENS = 4096


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider implementation.

    Hidden design decisions:
    - Anthropic API client initialization
    - System message lifted into the ``system`` parameter
    - Anthropic requires max_tokens on every request
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        default_system: str = "",
        base_url: str | None = None,
        **client_kwargs: Any
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Default model to use
            default_system: System prompt used when messages carry none
            base_url: Optional custom API base URL
            **client_kwargs: Additional kwargs for AsyncAnthropic client
        """
        self._model = model
        self._default_system = default_system
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def _request_params(
        self,
        messages: list[ChatMessage],
        model: str | None,
        max_tokens: int,
        temperature: float | None,
        **kwargs: Any
    ) -> dict[str, Any]:
        system_instruction, turns = split_system_message(messages, self._default_system)
        request_params: dict[str, Any] = {
            "model": model or self._model,
            "system": system_instruction,
            "messages": [{"role": msg.role, "content": msg.content} for msg in turns],
            "max_tokens": max_tokens,
            **kwargs
        }
        if temperature is not None:
            request_params["temperature"] = temperature
        return request_params

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.8,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion using Anthropic Claude.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate (default: 2048)
            **kwargs: Additional Anthropic-specific parameters

        Returns:
            LLMResponse with the concatenated text blocks
        """
        request_params = self._request_params(
            messages, model, max_tokens or COMPLETION_MAX_TOKENS, temperature, **kwargs
        )
        response = await self._client.messages.create(**request_params)

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens
            }

        content = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

        return LLMResponse(
            content=content,
            model=response.model,
            usage=usage
        )

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Generate a streaming chat completion using Anthropic Claude.

        Returns:
            StreamingResponse that yields text chunks and captures usage info
        """
        request_params = self._request_params(
            messages, model, max_tokens or STREAM_MAX_TOKENS, temperature, **kwargs
        )
        response = StreamingResponse(self._stream_generator(request_params))
        self._current_stream_response = response
        return response

    async def _stream_generator(
        self,
        request_params: dict[str, Any],
    ) -> AsyncIterator[str]:
        """Internal generator that yields text deltas and captures usage."""
        input_tokens = 0
        output_tokens = 0

        async with self._client.messages.stream(**request_params) as stream:
            async for event in stream:
                event_type = getattr(event, "type", None)
                if event_type == "message_start":
                    usage = getattr(event.message, "usage", None)
                    if usage is not None:
                        input_tokens = usage.input_tokens
                elif event_type == "message_delta":
                    usage = getattr(event, "usage", None)
                    if usage is not None:
                        output_tokens = usage.output_tokens
                elif (
                    event_type == "content_block_delta"
                    and getattr(event.delta, "type", None) == "text_delta"
                    and event.delta.text
                ):
                    yield event.delta.text

        self._current_stream_response.set_usage({
            "prompt_tokens": input_tokens,
            "completion_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
        })

    async def close(self) -> None:
        """Close the Anthropic client."""
        await self._client.close()
