"""Source Watcher: turn whatever a source offers into change notifications.

Sources differ in what they can tell us. A board widget with an event API
reports moves, undos, resets and loads directly. A plain element can only
report that something in its subtree changed. Anything else has to be
polled. The watcher picks the best available strategy once, when it
starts, and sends every notification into the same
:class:`~fenwatch.watch.stabilizer.ChangeStabilizer`; it never decides on
its own whether the position changed.
"""

from enum import Enum
from typing import Any, Callable

from loguru import logger

from fenwatch.core.configs.schema import StabilizerConfig, WatcherConfig
from fenwatch.core.position import normalize
from fenwatch.watch.reader import BoardSource, PositionReader
from fenwatch.watch.scheduler import Scheduler, TimerHandle
from fenwatch.watch.sink import EmissionSink
from fenwatch.watch.stabilizer import ChangeStabilizer


class Capability(Enum):
    """Change-notification strategy supported by a source."""

    EVENTS = "events"
    MUTATIONS = "mutations"
    POLL = "poll"


def detect_capability(source: Any) -> Capability:
    """Pick the strongest change-notification strategy ``source`` supports.

    Order: native events (``on``), then structural observation
    (``observe``), then polling.
    """
    if callable(getattr(source, "on", None)):
        return Capability.EVENTS
    if callable(getattr(source, "observe", None)):
        return Capability.MUTATIONS
    return Capability.POLL


class SourceWatcher:
    """Watch one live source and publish its settled positions.

    Example:
        sink = EmissionSink()
        sink.subscribe(print)
        watcher = SourceWatcher(FileSource("board.fen"), sink, AsyncioScheduler())
        watcher.start()
    """

    def __init__(
        self,
        source: BoardSource,
        sink: EmissionSink,
        scheduler: Scheduler,
        config: WatcherConfig | None = None,
        stabilizer_config: StabilizerConfig | None = None,
    ) -> None:
        self.source = source
        self.sink = sink
        self.scheduler = scheduler
        self.config = config or WatcherConfig()
        self.reader = PositionReader(source)
        self.stabilizer = ChangeStabilizer(self.reader, sink, scheduler, stabilizer_config)

        self.capability = detect_capability(source)
        self.running = False

        self._subscribed: list[str] = []
        self._disconnect: Callable[[], Any] | None = None
        self._poll_timer: TimerHandle | None = None

    def start(self) -> None:
        """Publish the initial position if it is new and attach the change strategy.

        Calling ``start`` on a running watcher does nothing.
        """
        if self.running:
            return
        self.running = True

        initial = normalize(self.reader.read())
        if initial is None:
            logger.info("No initial position readable")
        elif self.sink.state.is_new(initial):
            logger.info(f"Initial position: {initial.raw}")
            self.sink.emit(initial)
        else:
            logger.debug(f"Initial position already published: {initial.raw}")

        if self.capability is Capability.EVENTS:
            for event in self.config.events:
                self.source.on(event, self.stabilizer.notify)  # type: ignore[attr-defined]
                self._subscribed.append(event)
        elif self.capability is Capability.MUTATIONS:
            self._disconnect = self.source.observe(self._on_mutation)  # type: ignore[attr-defined]
        else:
            self._schedule_poll()

        logger.info(f"Watching source via {self.capability.value}")

    def stop(self) -> None:
        """Detach from the source and cancel every outstanding timer."""
        if not self.running:
            return
        self.running = False

        off = getattr(self.source, "off", None)
        for event in self._subscribed:
            if callable(off):
                off(event, self.stabilizer.notify)
        self._subscribed.clear()

        if self._disconnect is not None:
            self._disconnect()
            self._disconnect = None

        if self._poll_timer is not None:
            self._poll_timer.cancel()
            self._poll_timer = None

        self.stabilizer.cancel()
        logger.info("Watcher stopped")

    def _on_mutation(self, *_records: Any) -> None:
        self.stabilizer.notify()

    def _schedule_poll(self) -> None:
        self._poll_timer = self.scheduler.schedule_after(self.config.poll_interval, self._poll_tick)

    def _poll_tick(self) -> None:
        self._poll_timer = None
        if not self.running:
            return
        # Fires whether or not anything changed; the stabilizer de-duplicates
        self.stabilizer.notify()
        self._schedule_poll()
