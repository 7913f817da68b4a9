"""Tag grammar shared by reasoning steps and timeline events.

A tag is a closed-vocabulary word in square brackets, matched
case-insensitively. Two vocabularies use it:

- reasoning tags, read line by line from ``<think>`` blocks
  (``[TAG] rest-of-line`` at the start of a line)
- timeline tags, read from visible response text by splitting on every
  tag occurrence wherever it appears
"""

import re
from collections.abc import Iterator
from enum import Enum
from functools import lru_cache
from typing import NamedTuple

from ..utils import ELLIPSIS, truncate
from .models import ReasoningTag, ThinkingStep, TimelineEvent, TimelineTag

TIMELINE_TEXT_LIMIT = 80


class TaggedLine(NamedTuple):
    tag: str
    text: str
    start: int
    end: int


@lru_cache(maxsize=8)
def _alternation(vocabulary: type[Enum]) -> str:
    return "|".join(re.escape(member.name) for member in vocabulary)


@lru_cache(maxsize=8)
def line_pattern(vocabulary: type[Enum]) -> re.Pattern[str]:
    """``[TAG] text`` anchored at a line start; text must be non-blank."""
    return re.compile(
        rf"^[ \t]*\[({_alternation(vocabulary)})\][ \t]*(\S[^\n]*)$",
        re.IGNORECASE | re.MULTILINE,
    )


@lru_cache(maxsize=8)
def split_pattern(vocabulary: type[Enum]) -> re.Pattern[str]:
    """``[TAG]`` anywhere, with the tag captured so ``re.split`` keeps it."""
    return re.compile(rf"\[({_alternation(vocabulary)})\]", re.IGNORECASE)


def iter_tagged_lines(
    text: str,
    vocabulary: type[Enum],
    pos: int = 0,
) -> Iterator[TaggedLine]:
    """Yield every non-overlapping tagged line, in order of appearance.

    Tags are upper-cased and text is stripped. ``pos`` restricts the scan
    to ``text[pos:]`` while keeping line anchoring relative to the full
    string.
    """
    for match in line_pattern(vocabulary).finditer(text, pos):
        yield TaggedLine(
            tag=match.group(1).upper(),
            text=match.group(2).strip(),
            start=match.start(),
            end=match.end(),
        )


def extract_thinking_steps(text: str) -> list[ThinkingStep]:
    """Extract reasoning steps from free text. Never raises."""
    return [
        ThinkingStep(tag=ReasoningTag(line.tag), text=line.text)
        for line in iter_tagged_lines(text, ReasoningTag)
    ]


def clip_timeline_text(line: str) -> str:
    """Limit event text to 80 characters, the ellipsis included."""
    if len(line) <= TIMELINE_TEXT_LIMIT:
        return line
    return truncate(line, TIMELINE_TEXT_LIMIT - len(ELLIPSIS))


def parse_timeline_events(content: str) -> list[TimelineEvent]:
    """Detect timeline events in visible response text.

    Splitting on the tag pattern gives ``[prefix, tag1, text1, tag2, ...]``;
    each ``(tag, text)`` pair becomes one event whose text is the first
    line of the segment, truncated to 80 characters.
    """
    parts = split_pattern(TimelineTag).split(content)
    events: list[TimelineEvent] = []

    for i in range(1, len(parts), 2):
        segment = parts[i + 1] if i + 1 < len(parts) else ""
        first_line = segment.strip().split("\n")[0]
        events.append(TimelineEvent(
            type=TimelineTag(parts[i].lower()),
            text=clip_timeline_text(first_line),
        ))

    return events


def canonical_timeline_event(content: str) -> TimelineTag | None:
    """Type of the last timeline event in ``content``, if any."""
    events = parse_timeline_events(content)
    return events[-1].type if events else None
