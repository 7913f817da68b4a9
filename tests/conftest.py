"""Pytest configuration and shared fixtures."""
from collections.abc import AsyncIterator, Sequence

import pytest

from daiy.config import PacingConfig, Settings
from daiy.llm.models import ChatMessage, ProviderName

DECOMPOSITION = """\
Step 1: The student wants to know why 1/0 is undefined.
Step 2: Prerequisite is understanding division as inverse multiplication.

<think>
[ANALYZING] Student asks why division by zero is undefined
[DECOMPOSING] Division as the inverse of multiplication
[MAPPING] Needs multiplication facts and the idea of an inverse
[DETECTING] May believe the answer is zero or infinity
[STRATEGIZING] Ask what number times zero gives one
[FORMULATING] What would you multiply by 0 to get 1?
</think>"""

CRITIQUE = "The analysis is sound. Lead with a concrete multiplication check."


class FakeBackend:
    """Chat backend that records calls and replays canned output.

    Args:
        completions: Results returned by successive ``complete_chat`` calls
        stream_chunks: Fragments yielded by ``stream_chat``
        fail_on: Call number (1-based, across both methods) that raises
        error: Exception raised on the failing call
    """

    def __init__(
        self,
        completions: Sequence[str] = (DECOMPOSITION, CRITIQUE),
        stream_chunks: Sequence[str] = ("What number ", "times 0 ", "gives 1? [QUESTION] Try it."),
        fail_on: int | None = None,
        error: Exception | None = None,
    ):
        self.completions = list(completions)
        self.stream_chunks = list(stream_chunks)
        self.fail_on = fail_on
        self.error = error or RuntimeError("upstream exploded")
        self.calls: list[tuple[str, ProviderName | str, str, list[ChatMessage], str]] = []

    def _record(self, kind, provider, model, messages, credential) -> None:
        self.calls.append((kind, provider, model, list(messages), credential))
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise self.error

    async def complete_chat(self, provider, model, messages, credential) -> str:
        self._record("complete", provider, model, messages, credential)
        return self.completions.pop(0)

    async def stream_chat(self, provider, model, messages, credential) -> AsyncIterator[str]:
        self._record("stream", provider, model, messages, credential)
        for chunk in self.stream_chunks:
            yield chunk


class RecordingClock:
    """Clock that never sleeps and remembers every requested delay."""

    def __init__(self):
        self.delays: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def backend():
    """Return a fake backend with the default canned output."""
    return FakeBackend()


@pytest.fixture
def clock():
    """Return a clock that records delays instead of sleeping."""
    return RecordingClock()


@pytest.fixture
def settings():
    """Return settings with a server-side groq key and default pacing."""
    return Settings(groq_api_key="gsk-server-key-1234", pacing=PacingConfig())


@pytest.fixture
def user_messages():
    """Return a one-message conversation."""
    return [ChatMessage(role="user", content="Why can't I divide by zero?")]
