"""Clock abstraction and the ambient cancellation context of one lifecycle call."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Protocol


def format_duration(seconds: float) -> str:
    """Render seconds as ``"20s"``, ``"10m0s"`` or ``"1h30m0s"``."""
    if seconds < 60:
        return f"{seconds:g}s"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    text = f"{minutes:g}m{secs:g}s"
    if hours:
        text = f"{hours:g}h{text}"
    return text


class Clock(Protocol):
    """Monotonic time source able to wait on an event with a timeout."""

    def now(self) -> float:
        """Return monotonic seconds."""
        ...

    async def wait(self, event: asyncio.Event, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds; return ``True`` if ``event`` fired."""
        ...


class MonotonicClock:
    """Production clock backed by ``time.monotonic`` and the running event loop."""

    def now(self) -> float:
        return time.monotonic()

    async def wait(self, event: asyncio.Event, timeout: float) -> bool:
        if event.is_set():
            return True
        if timeout <= 0:
            return False
        try:
            await asyncio.wait_for(event.wait(), timeout)
        except TimeoutError:
            return False
        return True


@dataclass(slots=True)
class ReconcileContext:
    """Cancellation signal and optional ambient deadline handed down by the host.

    The deadline is expressed in the clock's monotonic seconds. Either the
    event firing or the deadline passing counts as cancellation.
    """

    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    deadline: float | None = None
    clock: Clock = field(default_factory=MonotonicClock)

    @classmethod
    def with_timeout(cls, seconds: float, *, clock: Clock | None = None) -> ReconcileContext:
        """Context whose ambient deadline is ``seconds`` from now."""
        resolved = MonotonicClock() if clock is None else clock
        return cls(deadline=resolved.now() + seconds, clock=resolved)

    @property
    def cancelled(self) -> bool:
        if self.cancel_event.is_set():
            return True
        return self.deadline is not None and self.clock.now() >= self.deadline

    def cancel(self) -> None:
        self.cancel_event.set()

    def remaining(self) -> float | None:
        """Seconds left before the ambient deadline, ``None`` without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self.clock.now())

    async def sleep(self, seconds: float) -> bool:
        """Sleep for ``seconds``; return ``False`` when cancellation cut it short."""
        if self.cancelled:
            return False

        duration = max(0.0, seconds)
        remaining = self.remaining()
        cut_by_deadline = remaining is not None and remaining < duration
        if cut_by_deadline:
            duration = remaining

        fired = await self.clock.wait(self.cancel_event, duration)
        return not (fired or cut_by_deadline)
