"""Events produced by the orchestrator and carried by the transport.

A stream is any number of :class:`TextEvent` followed by exactly one
terminal event, :class:`DoneEvent` or :class:`ErrorEvent`.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class TextEvent(BaseModel):
    """A fragment of output text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class ErrorEvent(BaseModel):
    """Terminal failure; ``message`` is shown to the user."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    message: str


class DoneEvent(BaseModel):
    """Terminal success."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["done"] = "done"


StreamEvent = Annotated[
    Union[TextEvent, ErrorEvent, DoneEvent],
    Field(discriminator="kind"),
]


def is_terminal(event: TextEvent | ErrorEvent | DoneEvent) -> bool:
    return isinstance(event, (ErrorEvent, DoneEvent))
