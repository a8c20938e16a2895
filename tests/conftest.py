"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterable

import pytest

from fenwatch.core.position import normalize
from fenwatch.watch import EmissionSink, EmissionState

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
EMPTY_BOARD = "8/8/8/8/8/8/8/8"


class ManualTimer:
    """Timer handle for ManualScheduler."""

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class ManualScheduler:
    """Virtual-clock scheduler: time only moves when a test advances it."""

    def __init__(self) -> None:
        self.time = 0.0
        self.timers: list[ManualTimer] = []

    def now(self) -> float:
        return self.time

    def schedule_after(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.time + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active_timers(self) -> list[ManualTimer]:
        return [t for t in self.timers if t.active]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self.time + seconds
        while True:
            due = [t for t in self.active_timers if t.when <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.time = max(self.time, timer.when)
            timer.fired = True
            timer.callback()
        self.time = target


class TimelineSource:
    """Source whose position depends on the scheduler's clock.

    ``timeline`` is a list of ``(from_time, value)``; a value that is an
    exception instance is raised instead of returned.
    """

    def __init__(self, scheduler: ManualScheduler, timeline: Iterable[tuple[float, object]]) -> None:
        self.scheduler = scheduler
        self.timeline = sorted(timeline, key=lambda entry: entry[0])
        self.reads = 0

    def get_fen(self) -> object:
        self.reads += 1
        value: object = None
        for start, entry in self.timeline:
            if start <= self.scheduler.now():
                value = entry
        if isinstance(value, Exception):
            raise value
        return value


class SequenceSource:
    """Source that returns the given values in turn, repeating the last one."""

    def __init__(self, values: list[object]) -> None:
        self.values = list(values)
        self.reads = 0

    def get_fen(self) -> object:
        value = self.values[min(self.reads, len(self.values) - 1)]
        self.reads += 1
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def scheduler() -> ManualScheduler:
    """A fresh virtual-clock scheduler."""
    return ManualScheduler()


@pytest.fixture
def emissions() -> list[str]:
    """Collects every raw position published by the sink fixture."""
    return []


@pytest.fixture
def sink(emissions: list[str]) -> EmissionSink:
    """Sink whose last emitted position is the standard starting position."""
    state = EmissionState()
    start = normalize(START_FEN)
    assert start is not None
    state.record(start)

    sink = EmissionSink(state)
    sink.subscribe(emissions.append)
    return sink
