"""Data structures for reasoning steps, timeline events and decoder state."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ReasoningTag(str, Enum):
    """Tags that label a line inside a ``<think>`` block."""

    ANALYZING = "ANALYZING"
    DECOMPOSING = "DECOMPOSING"
    MAPPING = "MAPPING"
    DETECTING = "DETECTING"
    IDENTIFYING = "IDENTIFYING"
    STRATEGIZING = "STRATEGIZING"
    CONNECTING = "CONNECTING"
    EVALUATING = "EVALUATING"
    FORMULATING = "FORMULATING"
    RECALLING = "RECALLING"
    QUESTIONING = "QUESTIONING"
    SYNTHESIZING = "SYNTHESIZING"
    CRITIQUING = "CRITIQUING"
    REFINING = "REFINING"
    VALIDATING = "VALIDATING"


class TimelineTag(str, Enum):
    """Tags that mark key moments in a visible tutoring response."""

    QUESTION = "question"
    ASSUMPTION = "assumption"
    CHALLENGE = "challenge"
    INSIGHT = "insight"
    BREAKTHROUGH = "breakthrough"


class ThinkingStep(BaseModel):
    """One ``[TAG] text`` line from a reasoning block."""

    model_config = ConfigDict(frozen=True)

    tag: ReasoningTag
    text: str

    def render(self) -> str:
        """Format the step the way it travels inside the stream."""
        return f"[{self.tag.value}] {self.text}\n"


class TimelineEvent(BaseModel):
    """A tagged moment detected in response text."""

    model_config = ConfigDict(frozen=True)

    type: TimelineTag
    text: str = Field(
        description="First line after the tag, at most 80 characters including the ellipsis",
    )


class ParseState(BaseModel):
    """Decoder view of the accumulated stream buffer.

    Attributes:
        is_thinking: An open marker was seen but no close marker yet
        is_complete: Both markers were seen
        steps: Reasoning steps found inside the block, in order
        response_content: Visible answer text (empty while thinking)
        raw_thinking: Text inside the block
    """

    model_config = ConfigDict(frozen=True)

    is_thinking: bool = False
    is_complete: bool = False
    steps: list[ThinkingStep] = Field(default_factory=list)
    response_content: str = ""
    raw_thinking: str = ""
