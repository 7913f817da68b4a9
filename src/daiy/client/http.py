"""Async HTTP client for ``POST /api/chat``.

This is the reference receiver for the stream: it decodes SSE frames,
accumulates the text, reports the decoder state as the buffer grows and
finalises the turn when the stream ends.
"""

import logging
from collections.abc import AsyncIterable, Callable, Mapping, Sequence
from typing import Any

import httpx

from ..llm.models import ChatMessage
from ..reasoning.decoder import StreamDecoder
from ..reasoning.models import ParseState
from ..transport.events import DoneEvent, ErrorEvent, StreamEvent, TextEvent
from ..transport.sse import decode_stream
from ..turns import TurnOutcome, error_turn, finalize_turn

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_TIMEOUT = httpx.Timeout(10.0, read=120.0)
FALLBACK_ERROR = "Failed to get response"

StateCallback = Callable[[ParseState], None]


async def collect_turn(
    events: AsyncIterable[StreamEvent],
    on_state: StateCallback | None = None,
) -> TurnOutcome:
    """Accumulate a decoded event stream into a finalised turn.

    An error event replaces the turn with an error turn. A stream that ends
    without a terminal event is finalised with whatever text arrived.
    """
    decoder = StreamDecoder()
    async for event in events:
        if isinstance(event, ErrorEvent):
            logger.debug("Stream ended with error: %s", event.message)
            return error_turn(event.message)
        if isinstance(event, TextEvent):
            state = decoder.feed(event.text)
            if on_state is not None:
                on_state(state)
        elif isinstance(event, DoneEvent):
            break
    return finalize_turn(decoder.content)


class ChatClient:
    """Client for a running daiy server.

    Args:
        base_url: Server root URL
        http_client: Pre-built ``httpx.AsyncClient`` (for example one bound
            to an ASGI app in tests). The client is not closed by
            :meth:`close` when supplied.
        timeout: Timeout for the client this class builds itself

    Usage:
        async with ChatClient("http://127.0.0.1:8000") as client:
            outcome = await client.send(messages, model="llama-3.3-70b-versatile")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ):
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def list_models(self) -> dict[str, Any]:
        """Fetch the model catalogue and the server's default model."""
        response = await self._http.get("/api/models")
        response.raise_for_status()
        return response.json()

    async def send(
        self,
        messages: Sequence[ChatMessage],
        model: str | None = None,
        api_keys: Mapping[str, str | None] | None = None,
        extended: bool = False,
        on_state: StateCallback | None = None,
    ) -> TurnOutcome:
        """Run one turn and return its finalised outcome.

        Failures never raise: a rejected request, a transport error or an
        error event in the stream all come back as an error turn.

        Args:
            messages: Conversation so far, ending with the user's message
            model: Model id (server default when omitted)
            api_keys: Per-provider keys (``openai``, ``anthropic``,
                ``google``, ``groq``)
            extended: Request the three-pass reasoning pipeline
            on_state: Called with the decoder state after each fragment
        """
        payload: dict[str, Any] = {
            "messages": [m.model_dump() for m in messages],
            "apiKeys": dict(api_keys or {}),
            "extendedThinking": extended,
        }
        if model:
            payload["model"] = model

        try:
            async with self._http.stream("POST", "/api/chat", json=payload) as response:
                if response.is_error:
                    await response.aread()
                    return error_turn(_error_message(response))

                return await collect_turn(decode_stream(response.aiter_bytes()), on_state)
        except httpx.RequestError as exc:
            logger.warning("Chat request failed: %s", exc)
            return error_turn(str(exc) or FALLBACK_ERROR)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or FALLBACK_ERROR
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return FALLBACK_ERROR
