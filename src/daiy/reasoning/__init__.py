"""Multi-pass reasoning: orchestration, tag grammar and stream decoding."""

from .decoder import (
    THINK_CLOSE,
    THINK_OPEN,
    StreamDecoder,
    parse_thinking_content,
    strip_thinking_block,
)
from .models import ParseState, ReasoningTag, ThinkingStep, TimelineEvent, TimelineTag
from .orchestrator import PassOrchestrator, PassStage, prepare_turn
from .pacing import AsyncioClock, CancellationToken, Clock
from .tags import canonical_timeline_event, extract_thinking_steps, parse_timeline_events

__all__ = [
    "THINK_CLOSE",
    "THINK_OPEN",
    "AsyncioClock",
    "CancellationToken",
    "Clock",
    "ParseState",
    "PassOrchestrator",
    "PassStage",
    "ReasoningTag",
    "StreamDecoder",
    "ThinkingStep",
    "TimelineEvent",
    "TimelineTag",
    "canonical_timeline_event",
    "extract_thinking_steps",
    "parse_thinking_content",
    "parse_timeline_events",
    "prepare_turn",
    "strip_thinking_block",
]
