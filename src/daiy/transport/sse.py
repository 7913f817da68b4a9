"""Server-sent-event framing for the chat stream.

Every event is one ``data: <payload>\\n\\n`` frame:

- text:  ``data: {"text": "..."}``
- error: ``data: {"error": "..."}``
- done:  ``data: [DONE]``

The encoder never splits an event across frames or packs two events into
one. :class:`FrameReader` is the receiving half: it accepts chunks with
arbitrary boundaries and yields events as whole frames arrive.
"""

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator

from .events import DoneEvent, ErrorEvent, StreamEvent, TextEvent, is_terminal

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
FRAME_SEPARATOR = "\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def encode_payload(event: StreamEvent) -> str:
    """Frame body for ``event`` (without the ``data:`` prefix)."""
    if isinstance(event, TextEvent):
        return json.dumps({"text": event.text}, ensure_ascii=False)
    if isinstance(event, ErrorEvent):
        return json.dumps({"error": event.message}, ensure_ascii=False)
    if isinstance(event, DoneEvent):
        return DONE_SENTINEL
    raise TypeError(f"Not a stream event: {event!r}")


def encode_event(event: StreamEvent) -> bytes:
    """Encode one event as one UTF-8 frame."""
    return f"{DATA_PREFIX}{encode_payload(event)}{FRAME_SEPARATOR}".encode("utf-8")


async def encode_events(events: AsyncIterable[StreamEvent]) -> AsyncIterator[bytes]:
    """Encode a stream of events, stopping after the first terminal event."""
    async for event in events:
        yield encode_event(event)
        if is_terminal(event):
            return


def decode_payload(payload: str) -> StreamEvent | None:
    """Decode a frame body; ``None`` for anything unrecognised.

    Malformed JSON is noise from the receiver's point of view: it is
    logged and dropped so decoding can continue with the next frame.
    """
    if payload == DONE_SENTINEL:
        return DoneEvent()

    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("Skipping malformed frame: %.80s", payload)
        return None

    if not isinstance(data, dict):
        logger.debug("Skipping non-object frame: %.80s", payload)
        return None

    error = data.get("error")
    if error:
        return ErrorEvent(message=str(error))

    text = data.get("text")
    if isinstance(text, str) and text:
        return TextEvent(text=text)

    return None


class FrameReader:
    """Incremental frame parser for the receiving side.

    Chunks may split frames, lines or multi-byte characters anywhere.

    Usage:
        reader = FrameReader()
        async for chunk in response.aiter_bytes():
            for event in reader.feed(chunk):
                ...
    """

    def __init__(self) -> None:
        self._pending = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")()

    def _decode(self, chunk: bytes | str) -> str:
        if isinstance(chunk, str):
            return chunk
        return self._decoder.decode(chunk)

    def feed(self, chunk: bytes | str) -> list[StreamEvent]:
        """Consume a chunk and return every event completed by it."""
        self._pending += self._decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        return [event for event in map(self._parse_line, lines) if event is not None]

    def close(self) -> list[StreamEvent]:
        """Flush a final line that arrived without a newline."""
        line, self._pending = self._pending + self._decoder.decode(b"", final=True), ""
        event = self._parse_line(line)
        return [event] if event is not None else []

    def _parse_line(self, line: str) -> StreamEvent | None:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return None
        return decode_payload(line[len(DATA_PREFIX):])


async def decode_stream(chunks: AsyncIterable[bytes | str]) -> AsyncIterator[StreamEvent]:
    """Decode a byte stream into events, stopping after a terminal event."""
    reader = FrameReader()
    async for chunk in chunks:
        for event in reader.feed(chunk):
            yield event
            if is_terminal(event):
                return
    for event in reader.close():
        yield event
