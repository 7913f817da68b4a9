"""Turn finalisation on the receiving side.

Once a stream ends, the accumulated buffer is reduced to what gets stored
and displayed: the visible text without the reasoning block, whether the
turn was a breakthrough, and the timeline events it contains.
"""

from pydantic import BaseModel, ConfigDict, Field

from .llm.models import ChatMessage
from .reasoning.decoder import strip_thinking_block
from .reasoning.models import TimelineEvent, TimelineTag
from .reasoning.tags import parse_timeline_events

BREAKTHROUGH_MARKER = f"[{TimelineTag.BREAKTHROUGH.name}]"
ERROR_PREFIX = "⚠️ Error: "


class TurnOutcome(BaseModel):
    """Finalised assistant turn."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Visible text with the reasoning block removed")
    is_breakthrough: bool = False
    timeline_event: TimelineTag | None = Field(
        default=None,
        description="Type of the last timeline event in the content",
    )
    timeline_events: list[TimelineEvent] = Field(default_factory=list)
    is_error: bool = Field(default=False, description="Turn reports a failure and is not persisted")

    def to_message(self) -> ChatMessage:
        return ChatMessage(role="assistant", content=self.content)


def finalize_turn(full_content: str) -> TurnOutcome:
    """Reduce a complete stream buffer to a :class:`TurnOutcome`."""
    content = strip_thinking_block(full_content)
    events = parse_timeline_events(content)
    return TurnOutcome(
        content=content,
        is_breakthrough=BREAKTHROUGH_MARKER in content,
        timeline_event=events[-1].type if events else None,
        timeline_events=events,
    )


def error_turn(message: str) -> TurnOutcome:
    """Assistant turn shown in place of an answer when a stream fails."""
    return TurnOutcome(content=f"{ERROR_PREFIX}{message}", is_error=True)
