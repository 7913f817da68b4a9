"""Event model and SSE framing for the chat stream."""

from .events import DoneEvent, ErrorEvent, StreamEvent, TextEvent, is_terminal
from .sse import (
    SSE_HEADERS,
    FrameReader,
    decode_payload,
    decode_stream,
    encode_event,
    encode_events,
)

__all__ = [
    "SSE_HEADERS",
    "DoneEvent",
    "ErrorEvent",
    "FrameReader",
    "StreamEvent",
    "TextEvent",
    "decode_payload",
    "decode_stream",
    "encode_event",
    "encode_events",
    "is_terminal",
]
