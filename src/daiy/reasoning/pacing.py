"""Paced replay of text that is already known.

A non-streamed pass returns its whole result at once. To present it as
live reasoning, its lines are replayed one at a time with a pause after
each. The pause goes through a :class:`Clock` so tests can run without
real delays.
"""

import asyncio
from collections.abc import AsyncIterator, Iterable
from typing import NamedTuple, Protocol

from ..errors import StreamCancelled


class Clock(Protocol):
    """Source of delays."""

    async def sleep(self, seconds: float) -> None:
        ...


class AsyncioClock:
    """Clock backed by :func:`asyncio.sleep`."""

    async def sleep(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)


class CancellationToken:
    """Cooperative cancellation flag threaded through a whole turn.

    The transport cancels it when the client goes away; the orchestrator
    checks it before each upstream call and each emitted fragment.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise StreamCancelled(self._reason or "cancelled")

    async def wait(self) -> None:
        await self._event.wait()


class Paced(NamedTuple):
    """A fragment and the pause that follows it."""

    fragment: str
    delay: float


def evenly(fragments: Iterable[str], delay: float) -> list[Paced]:
    """Pair every fragment with the same trailing delay."""
    return [Paced(fragment, delay) for fragment in fragments]


async def replay(
    items: Iterable[Paced],
    clock: Clock,
    token: CancellationToken | None = None,
) -> AsyncIterator[str]:
    """Yield each fragment, then wait its delay before the next one.

    Raises:
        StreamCancelled: If ``token`` is cancelled before a fragment is
            yielded
    """
    for item in items:
        if token is not None:
            token.raise_if_cancelled()
        yield item.fragment
        await clock.sleep(item.delay)
