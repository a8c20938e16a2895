"""Change Stabilizer: confirm that a live position has actually settled.

A change notification only says that *something* happened to the board.
Reading it straight away often catches the widget mid-animation or
half-updated. The stabilizer therefore runs a two-phase protocol per
detection burst:

1. wait ``settle_delay``, read and normalize (sample A);
2. wait ``confirm_delay``, read and normalize again (sample B);
3. emit sample B only if A and B agree on placement and side to move
   *and* B differs from the last emitted position.

If the samples disagree, or the position is not new, the protocol starts
over from step 1 until ``max_wait`` has elapsed since the burst began,
after which the burst is dropped. Any unreadable sample abandons the
burst immediately.

At most one attempt is in flight. Notifications arriving meanwhile are
coalesced into a single follow-up attempt that starts once the current
one resolves.
"""

from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from fenwatch.core.configs.schema import StabilizerConfig
from fenwatch.core.position import NormalizedPosition, normalize
from fenwatch.watch.reader import PositionReader
from fenwatch.watch.scheduler import Scheduler, TimerHandle
from fenwatch.watch.sink import EmissionSink, EmissionState


class Outcome(Enum):
    """How a stabilization attempt ended."""

    EMITTED = "emitted"
    UNREADABLE = "unreadable"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass
class StabilizationAttempt:
    """State of one in-flight detection cycle."""

    started_at: float
    sample_a: NormalizedPosition | None = None
    sample_b: NormalizedPosition | None = None
    rounds: int = 0


@dataclass
class StabilizerContext:
    """Everything the stabilizer mutates, owned by one stabilizer instance."""

    emission: EmissionState = field(default_factory=EmissionState)
    attempt: StabilizationAttempt | None = None
    rescan_requested: bool = False

    @property
    def pending(self) -> bool:
        return self.attempt is not None


class ChangeStabilizer:
    """Two-phase sample/confirm protocol in front of an EmissionSink.

    Example:
        stabilizer = ChangeStabilizer(PositionReader(source), sink, AsyncioScheduler())
        source.on("Move", stabilizer.notify)
    """

    def __init__(
        self,
        reader: PositionReader,
        sink: EmissionSink,
        scheduler: Scheduler,
        config: StabilizerConfig | None = None,
    ) -> None:
        """Initialize the stabilizer.

        Args:
            reader: Reader for the live source.
            sink: Sink that publishes confirmed positions. Its EmissionState
                is the one consulted for de-duplication.
            scheduler: Clock and timer provider.
            config: Timing configuration.
        """
        self.reader = reader
        self.sink = sink
        self.scheduler = scheduler
        self.config = config or StabilizerConfig()
        self.context = StabilizerContext(emission=sink.state)
        self.last_outcome: Outcome | None = None

        self._settle_timer: TimerHandle | None = None
        self._confirm_timer: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self.context.pending

    def notify(self) -> None:
        """Entry point for every change notification, whatever its source."""
        if self.context.pending:
            self.context.rescan_requested = True
            logger.trace("Change notification coalesced into pending attempt")
            return
        self._begin()

    def cancel(self) -> None:
        """Drop any in-flight attempt and its timers without emitting."""
        self._clear_timers()
        self.context.rescan_requested = False
        if self.context.attempt is not None:
            self.context.attempt = None
            self.last_outcome = Outcome.CANCELLED
            logger.debug("Stabilization attempt cancelled")

    def _begin(self) -> None:
        self._clear_timers()
        self.context.rescan_requested = False
        self.context.attempt = StabilizationAttempt(started_at=self.scheduler.now())
        self._settle_timer = self.scheduler.schedule_after(self.config.settle_delay, self._sample)

    def _sample(self) -> None:
        self._settle_timer = None
        attempt = self.context.attempt
        if attempt is None:
            return

        attempt.rounds += 1
        attempt.sample_a = normalize(self.reader.read())
        if attempt.sample_a is None:
            self._resolve(Outcome.UNREADABLE)
            return

        self._confirm_timer = self.scheduler.schedule_after(self.config.confirm_delay, self._confirm)

    def _confirm(self) -> None:
        self._confirm_timer = None
        attempt = self.context.attempt
        if attempt is None:
            return

        attempt.sample_b = normalize(self.reader.read())
        if attempt.sample_b is None:
            self._resolve(Outcome.UNREADABLE)
            return

        self._decide(attempt)

    def _decide(self, attempt: StabilizationAttempt) -> None:
        sample_a, sample_b = attempt.sample_a, attempt.sample_b
        assert sample_a is not None and sample_b is not None

        unchanged = sample_a.key == sample_b.key
        is_new = self.context.emission.is_new(sample_b)

        if unchanged and is_new:
            self.sink.emit(sample_b)
            self._resolve(Outcome.EMITTED)
            return

        elapsed = self.scheduler.now() - attempt.started_at
        if elapsed < self.config.max_wait:
            logger.trace(
                f"Round {attempt.rounds} not settled (unchanged={unchanged}, new={is_new}), "
                f"retrying after {elapsed:.3f}s"
            )
            attempt.sample_a = None
            attempt.sample_b = None
            self._settle_timer = self.scheduler.schedule_after(self.config.settle_delay, self._sample)
            return

        self._resolve(Outcome.TIMED_OUT)

    def _resolve(self, outcome: Outcome) -> None:
        attempt = self.context.attempt
        self.context.attempt = None
        self.last_outcome = outcome

        rounds = attempt.rounds if attempt is not None else 0
        logger.debug(f"Stabilization {outcome.value} after {rounds} round(s)")

        if self.context.rescan_requested:
            self._begin()

    def _clear_timers(self) -> None:
        if self._settle_timer is not None:
            self._settle_timer.cancel()
            self._settle_timer = None
        if self._confirm_timer is not None:
            self._confirm_timer.cancel()
            self._confirm_timer = None
