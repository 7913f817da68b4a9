"""Google Gemini LLM provider implementation.

Uses the official Google GenAI SDK for async chat completions.
Reference: https://github.com/googleapis/python-genai
"""

from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import types

from ..base import LLMProvider, split_system_message
from ..models import ChatMessage, LLMResponse, StreamingResponse


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation.

    Hidden design decisions:
    - Google GenAI client initialization
    - ``assistant`` turns are sent with the ``model`` role
    - System message becomes the ``system_instruction`` config field
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        default_system: str = "",
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Default model
            default_system: System prompt used when messages carry none
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._default_system = default_system
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def _convert_messages(self, messages: list[ChatMessage]) -> tuple[str, list[types.Content]]:
        """Convert ChatMessage list to Gemini format.

        Returns:
            Tuple of (system_instruction, contents)
        """
        system_instruction, turns = split_system_message(messages, self._default_system)
        contents = [
            types.Content(
                role="model" if msg.role == "assistant" else "user",
                parts=[types.Part(text=msg.content)]
            )
            for msg in turns
        ]
        return system_instruction, contents

    def _config(
        self,
        system_instruction: str,
        temperature: float | None,
        max_tokens: int | None,
        **kwargs: Any
    ) -> types.GenerateContentConfig:
        config = types.GenerateContentConfig(system_instruction=system_instruction, **kwargs)
        if temperature is not None:
            config.temperature = temperature
        if max_tokens is not None:
            config.max_output_tokens = max_tokens
        return config

    def _extract_content(self, response: Any) -> str:
        """Extract text content from a Gemini response or stream chunk."""
        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
                if texts:
                    return "".join(texts)

        try:
            return response.text or ""
        except (ValueError, AttributeError):
            return ""

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.8,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion using Google Gemini.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional Gemini-specific parameters

        Returns:
            LLMResponse with generated content
        """
        model_to_use = model or self._model
        system_instruction, contents = self._convert_messages(messages)

        response = await self._client.aio.models.generate_content(
            model=model_to_use,
            contents=contents,
            config=self._config(system_instruction, temperature, max_tokens, **kwargs)
        )

        usage = None
        if response.usage_metadata:
            usage = {
                "prompt_tokens": response.usage_metadata.prompt_token_count or 0,
                "completion_tokens": response.usage_metadata.candidates_token_count or 0,
                "total_tokens": response.usage_metadata.total_token_count or 0
            }

        return LLMResponse(
            content=self._extract_content(response),
            model=model_to_use,
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
        """Generate a streaming chat completion using Google Gemini.

        Returns:
            StreamingResponse that yields text chunks and captures usage info
        """
        system_instruction, contents = self._convert_messages(messages)
        config = self._config(system_instruction, temperature, max_tokens, **kwargs)

        response = StreamingResponse(self._stream_generator(model or self._model, contents, config))
        self._current_stream_response = response
        return response

    async def _stream_generator(
        self,
        model: str,
        contents: list[types.Content],
        config: types.GenerateContentConfig,
    ) -> AsyncIterator[str]:
        """Internal generator that yields text and captures usage from chunks."""
        usage = None

        stream = await self._client.aio.models.generate_content_stream(
            model=model, contents=contents, config=config
        )
        async for chunk in stream:
            if chunk.usage_metadata:
                usage = {
                    "prompt_tokens": chunk.usage_metadata.prompt_token_count or 0,
                    "completion_tokens": chunk.usage_metadata.candidates_token_count or 0,
                    "total_tokens": chunk.usage_metadata.total_token_count or 0,
                }

            text = self._extract_content(chunk)
            if text:
                yield text

        if usage:
            self._current_stream_response.set_usage(usage)

    async def close(self) -> None:
        """Close the Gemini client.

        The GenAI client keeps no connection that needs closing; this exists
        for interface consistency.
        """
