"""Multi-pass reasoning orchestrator.

Extended mode chains three provider calls into one logical turn:

1. Decompose (non-streaming): break the problem into six analytical steps
   and summarise them as tagged lines in a ``<think>`` block.
2. Critique (non-streaming): review the decomposition for flaws and settle
   on a refined teaching strategy.
3. Respond (streaming): the Socratic answer, written with both analyses in
   its system prompt.

The output of all three is multiplexed onto one event stream. The tagged
lines from pass 1 are replayed with pauses so the reasoning appears live,
and fixed narration lines bracket pass 2. Standard mode is a single
streamed call with the persona prompt.

Stages run strictly in sequence: INIT -> DECOMPOSE -> CRITIQUE -> RESPOND
-> DONE, with ERROR reachable from any non-terminal stage.
"""

import logging
import re
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import aclosing
from enum import Enum

from ..config import PacingConfig, Settings
from ..errors import BadRequest, StreamCancelled, UpstreamFailure
from ..llm.adapter import ChatBackend
from ..llm.models import ChatMessage, ProviderName
from ..llm.routing import get_provider_for_model, resolve_credential
from ..transport.events import DoneEvent, ErrorEvent, StreamEvent, TextEvent
from .decoder import THINK_CLOSE, THINK_OPEN, strip_thinking_block
from .messages import (
    build_conversation_summary,
    build_critique_messages,
    build_decompose_messages,
    build_refined_analysis,
    build_response_messages,
    build_single_pass_messages,
)
from .models import ReasoningTag, ThinkingStep
from .pacing import AsyncioClock, CancellationToken, Clock, Paced, evenly, replay
from .tags import extract_thinking_steps

logger = logging.getLogger(__name__)

OPEN_SENTINEL = f"{THINK_OPEN}\n"
CLOSE_SENTINEL = f"{THINK_CLOSE}\n\n"
DEFAULT_ERROR_MESSAGE = "AI generation failed"

CRITIQUING_STEP = ThinkingStep(
    tag=ReasoningTag.CRITIQUING,
    text="Reviewing analysis for blind spots and flaws",
)
REFINING_STEP = ThinkingStep(
    tag=ReasoningTag.REFINING,
    text="Strengthening teaching strategy based on critique",
)
VALIDATING_STEP = ThinkingStep(
    tag=ReasoningTag.VALIDATING,
    text="Confirming question targets the exact knowledge gap",
)

_EMBEDDED_BLOCK_RE = re.compile(r"<think>([\s\S]*?)</think>")


class PassStage(str, Enum):
    INIT = "init"
    DECOMPOSE = "decompose"
    CRITIQUE = "critique"
    RESPOND = "respond"
    DONE = "done"
    ERROR = "error"


TERMINAL_STAGES = frozenset({PassStage.DONE, PassStage.ERROR})


def as_upstream_failure(exc: Exception, stage: PassStage) -> UpstreamFailure:
    """Wrap a failure from any pass, keeping its original message."""
    if isinstance(exc, UpstreamFailure):
        return exc
    return UpstreamFailure(str(exc) or DEFAULT_ERROR_MESSAGE, stage=stage.value)


def extract_decomposition_steps(decomposition: str) -> list[ThinkingStep]:
    """Steps from an embedded ``<think>`` block, else from the whole text."""
    match = _EMBEDDED_BLOCK_RE.search(decomposition)
    return extract_thinking_steps(match.group(1) if match else decomposition)


class PassOrchestrator:
    """Runs one tutoring turn and produces its event stream.

    One instance serves exactly one turn; :meth:`run` may be iterated once.

    Args:
        backend: Provider adapter (``stream_chat`` / ``complete_chat``)
        provider: Provider serving ``model``
        model: Model identifier
        credential: API key, already resolved by the caller
        extended: Run the three-pass pipeline instead of a single call
        pacing: Delays for replayed reasoning lines
        clock: Delay source (asyncio by default)
        token: Cancellation token checked before every upstream call and
            every emitted fragment
    """

    def __init__(
        self,
        backend: ChatBackend,
        provider: ProviderName | str,
        model: str,
        credential: str,
        extended: bool = False,
        pacing: PacingConfig | None = None,
        clock: Clock | None = None,
        token: CancellationToken | None = None,
    ):
        self._backend = backend
        self._provider = provider
        self._model = model
        self._credential = credential
        self._extended = extended
        self._pacing = pacing or PacingConfig()
        self._clock = clock or AsyncioClock()
        self._token = token or CancellationToken()
        self._stage = PassStage.INIT
        self._error: str | None = None

    @property
    def stage(self) -> PassStage:
        return self._stage

    @property
    def error(self) -> str | None:
        """Message of the failure that ended the run, if any."""
        return self._error

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def model(self) -> str:
        return self._model

    @property
    def extended(self) -> bool:
        return self._extended

    def _enter(self, stage: PassStage) -> None:
        logger.debug("Turn %s -> %s", self._stage.value, stage.value)
        self._stage = stage

    def _fail(self, message: str | None) -> None:
        self._error = message
        self._enter(PassStage.ERROR)

    def _text(self, fragment: str) -> TextEvent:
        self._token.raise_if_cancelled()
        return TextEvent(text=fragment)

    async def run(self, messages: Sequence[ChatMessage]) -> AsyncIterator[StreamEvent]:
        """Yield the turn's events, ending with one ``Done`` or ``Error``.

        If the token is cancelled the run stops without a terminal event,
        since nobody is left to read it.

        Raises:
            RuntimeError: If this orchestrator has already run
        """
        if self._stage is not PassStage.INIT:
            raise RuntimeError("PassOrchestrator instances serve a single turn")

        history = list(messages)
        steps = self._run_extended(history) if self._extended else self._run_single(history)

        try:
            async with aclosing(steps):
                async for event in steps:
                    yield event
            self._enter(PassStage.DONE)
        except StreamCancelled as exc:
            self._fail(exc.message)
            logger.info("Turn cancelled: %s", exc.message)
            return
        except Exception as exc:
            failure = as_upstream_failure(exc, self._stage)
            self._fail(failure.message)
            logger.warning("Turn failed during %s: %s", failure.stage, failure.message, exc_info=exc)
            yield ErrorEvent(message=failure.message)
            return
        finally:
            if self._stage not in TERMINAL_STAGES:
                # The consumer closed the stream before it finished
                self._token.cancel("stream closed by consumer")
                self._fail(self._token.reason)

        yield DoneEvent()

    async def _run_single(self, history: list[ChatMessage]) -> AsyncIterator[TextEvent]:
        self._enter(PassStage.RESPOND)
        self._token.raise_if_cancelled()
        async for chunk in self._backend.stream_chat(
            self._provider, self._model, build_single_pass_messages(history), self._credential
        ):
            yield self._text(chunk)

    async def _run_extended(self, history: list[ChatMessage]) -> AsyncIterator[TextEvent]:
        yield self._text(OPEN_SENTINEL)

        # Pass 1: decomposition, replayed step by step
        self._enter(PassStage.DECOMPOSE)
        self._token.raise_if_cancelled()
        decomposition = await self._backend.complete_chat(
            self._provider, self._model, build_decompose_messages(history), self._credential
        )
        steps = extract_decomposition_steps(decomposition)
        logger.debug("Decomposition produced %d steps", len(steps))

        async for fragment in replay(
            evenly((step.render() for step in steps), self._pacing.step_delay),
            self._clock,
            self._token,
        ):
            yield self._text(fragment)

        # Pass 2: critique, bracketed by fixed narration
        self._enter(PassStage.CRITIQUE)
        async for fragment in replay(
            [Paced(CRITIQUING_STEP.render(), self._pacing.critique_delay)], self._clock, self._token
        ):
            yield self._text(fragment)

        analysis = strip_thinking_block(decomposition)
        self._token.raise_if_cancelled()
        critique = await self._backend.complete_chat(
            self._provider,
            self._model,
            build_critique_messages(analysis, build_conversation_summary(history)),
            self._credential,
        )

        async for fragment in replay(
            [
                Paced(REFINING_STEP.render(), self._pacing.refine_delay),
                Paced(VALIDATING_STEP.render(), self._pacing.validate_delay),
            ],
            self._clock,
            self._token,
        ):
            yield self._text(fragment)

        yield self._text(CLOSE_SENTINEL)

        # Pass 3: the visible answer, streamed through unchanged
        self._enter(PassStage.RESPOND)
        response_messages = build_response_messages(build_refined_analysis(analysis, critique), history)
        self._token.raise_if_cancelled()
        async for chunk in self._backend.stream_chat(
            self._provider, self._model, response_messages, self._credential
        ):
            yield self._text(chunk)


def prepare_turn(
    settings: Settings,
    backend: ChatBackend,
    messages: Sequence[ChatMessage],
    model: str | None = None,
    api_keys: Mapping[str, str | None] | None = None,
    extended: bool = False,
    clock: Clock | None = None,
    token: CancellationToken | None = None,
) -> PassOrchestrator:
    """Validate a turn request and build its orchestrator.

    Everything that can fail before the first model call is checked here,
    so callers can still answer with a plain error instead of a stream.

    Raises:
        BadRequest: If ``messages`` is empty
        MissingCredential: If no key is available for the model's provider
    """
    if not messages:
        raise BadRequest("Messages are required")

    model = model or settings.default_model
    provider = get_provider_for_model(model)
    credential = resolve_credential(provider, api_keys, settings)

    return PassOrchestrator(
        backend=backend,
        provider=provider,
        model=model,
        credential=credential,
        extended=extended,
        pacing=settings.pacing,
        clock=clock,
        token=token,
    )
