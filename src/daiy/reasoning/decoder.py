"""Receiving-side parser for the reasoning stream.

The stream carries an optional ``<think> ... </think>`` block of tagged
reasoning lines followed by the visible answer. The decoder classifies the
accumulated buffer as plain response, inside the block, or block complete,
and extracts the steps and the answer text.

:func:`parse_thinking_content` rescans the whole buffer on each call.
:class:`StreamDecoder` gives the same results while only scanning text it
has not seen before.
"""

import re

from .models import ParseState, ReasoningTag, ThinkingStep
from .tags import extract_thinking_steps, iter_tagged_lines

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"

_THINK_BLOCK_RE = re.compile(r"<think>[\s\S]*?</think>\s*")
_EXCESS_BLANK_LINES_RE = re.compile(r"\n{3,}")


def without_partial_marker(text: str, marker: str) -> str:
    """Drop a trailing start of ``marker`` that may still be completing."""
    for size in range(min(len(marker) - 1, len(text)), 0, -1):
        if text.endswith(marker[:size]):
            return text[:-size]
    return text


def _locate_markers(content: str) -> tuple[int, int]:
    open_idx = content.find(THINK_OPEN)
    if open_idx == -1:
        return -1, -1
    return open_idx, content.find(THINK_CLOSE, open_idx + len(THINK_OPEN))


def parse_thinking_content(full_content: str) -> ParseState:
    """Derive the parse state from the entire buffer.

    - no open marker: everything is response text
    - open marker only: inside the block, response suppressed; a close
      marker still arriving is held back so its text never forms a step
    - both markers: block complete, response is the trimmed remainder
    """
    open_idx, close_idx = _locate_markers(full_content)

    if open_idx == -1:
        return ParseState(response_content=full_content)

    start = open_idx + len(THINK_OPEN)

    if close_idx == -1:
        raw_thinking = full_content[start:]
        return ParseState(
            is_thinking=True,
            steps=extract_thinking_steps(without_partial_marker(raw_thinking, THINK_CLOSE)),
            raw_thinking=raw_thinking,
        )

    raw_thinking = full_content[start:close_idx]
    return ParseState(
        is_complete=True,
        steps=extract_thinking_steps(raw_thinking),
        response_content=full_content[close_idx + len(THINK_CLOSE):].strip(),
        raw_thinking=raw_thinking,
    )


def strip_thinking_block(content: str) -> str:
    """Remove every ``<think>...</think>`` span for storage and display.

    Blocks may span lines. Whitespace following a block is dropped and runs
    of blank lines left behind are collapsed.
    """
    stripped = _THINK_BLOCK_RE.sub("", content)
    return _EXCESS_BLANK_LINES_RE.sub("\n\n", stripped).strip()


class StreamDecoder:
    """Incremental decoder over a growing buffer.

    ``feed`` appends a fragment and returns the same :class:`ParseState`
    that :func:`parse_thinking_content` would return for the whole buffer.
    Marker searches resume just before the previous end of the buffer, and
    reasoning lines are extracted once their terminating newline arrives;
    only the trailing partial line is rescanned.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Forget everything received so far."""
        self._buffer = ""
        self._open_idx = -1
        self._close_idx = -1
        self._marker_scan_from = 0
        self._line_pos = 0
        self._steps: list[ThinkingStep] = []
        self._state = ParseState()

    @property
    def content(self) -> str:
        """Everything received so far."""
        return self._buffer

    @property
    def state(self) -> ParseState:
        return self._state

    def feed(self, fragment: str) -> ParseState:
        """Append ``fragment`` and return the updated parse state."""
        if not fragment and self._buffer:
            return self._state

        self._buffer += fragment
        if self._close_idx == -1:
            self._scan_markers()
        self._state = self._build_state()
        return self._state

    def _scan_markers(self) -> None:
        if self._open_idx == -1:
            idx = self._buffer.find(THINK_OPEN, self._marker_scan_from)
            if idx == -1:
                self._marker_scan_from = max(0, len(self._buffer) - len(THINK_OPEN) + 1)
                return
            self._open_idx = idx
            self._line_pos = idx + len(THINK_OPEN)
            self._marker_scan_from = self._line_pos

        idx = self._buffer.find(THINK_CLOSE, self._marker_scan_from)
        if idx == -1:
            self._marker_scan_from = max(
                self._open_idx + len(THINK_OPEN),
                len(self._buffer) - len(THINK_CLOSE) + 1,
            )
        else:
            self._close_idx = idx

    def _consume_complete_lines(self, region_end: int) -> str:
        """Extract steps from whole lines in ``[line_pos, region_end)``.

        Returns the trailing partial line, which is not consumed.
        """
        segment = self._buffer[self._line_pos:region_end]
        last_newline = segment.rfind("\n")
        if last_newline == -1:
            return segment

        complete = segment[:last_newline + 1]
        self._steps.extend(
            ThinkingStep(tag=ReasoningTag(line.tag), text=line.text)
            for line in iter_tagged_lines(complete, ReasoningTag)
        )
        self._line_pos += last_newline + 1
        return segment[last_newline + 1:]

    def _build_state(self) -> ParseState:
        if self._open_idx == -1:
            return ParseState(response_content=self._buffer)

        start = self._open_idx + len(THINK_OPEN)

        if self._close_idx == -1:
            tail = without_partial_marker(self._consume_complete_lines(len(self._buffer)), THINK_CLOSE)
            return ParseState(
                is_thinking=True,
                steps=self._steps + extract_thinking_steps(tail),
                raw_thinking=self._buffer[start:],
            )

        if self._line_pos < self._close_idx:
            tail = self._consume_complete_lines(self._close_idx)
            self._steps.extend(extract_thinking_steps(tail))
            self._line_pos = self._close_idx

        return ParseState(
            is_complete=True,
            steps=list(self._steps),
            response_content=self._buffer[self._close_idx + len(THINK_CLOSE):].strip(),
            raw_thinking=self._buffer[start:self._close_idx],
        )
