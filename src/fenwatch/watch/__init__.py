"""Position-change detection and stabilization pipeline."""

from fenwatch.watch.reader import BoardSource, PositionReader
from fenwatch.watch.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from fenwatch.watch.sink import FEN_PUSH, EmissionSink, EmissionState
from fenwatch.watch.sources import BrowserSource, FileSource, LiveBoard
from fenwatch.watch.stabilizer import (
    ChangeStabilizer,
    Outcome,
    StabilizationAttempt,
    StabilizerContext,
)
from fenwatch.watch.watcher import Capability, SourceWatcher, detect_capability

__all__ = [
    "FEN_PUSH",
    "AsyncioScheduler",
    "BoardSource",
    "BrowserSource",
    "Capability",
    "ChangeStabilizer",
    "EmissionSink",
    "EmissionState",
    "FileSource",
    "LiveBoard",
    "Outcome",
    "PositionReader",
    "Scheduler",
    "SourceWatcher",
    "StabilizationAttempt",
    "StabilizerContext",
    "TimerHandle",
    "detect_capability",
]
