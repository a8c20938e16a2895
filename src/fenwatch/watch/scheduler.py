"""Timer scheduling for the watch pipeline.

All suspension in the pipeline happens at timer boundaries. Components
never sleep; they ask a scheduler to call them back and keep the returned
handle so a superseded callback can be cancelled before it fires.
"""

import asyncio
from typing import Callable, Protocol


class TimerHandle(Protocol):
    """Cancellation handle for a scheduled callback."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Clock plus one-shot timers."""

    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    def schedule_after(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        ...


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    Callbacks run on the loop thread via ``loop.call_later``, so everything
    the pipeline touches stays in a single execution context.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize the scheduler.

        Args:
            loop: Event loop to schedule on. Defaults to the running loop
                at the time of the first call.
        """
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def schedule_after(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)
