"""Tests for capability detection and the source watcher."""

import asyncio
from pathlib import Path

import chess

from conftest import EMPTY_BOARD, START_FEN, SequenceSource
from fenwatch.core.configs import StabilizerConfig, WatcherConfig
from fenwatch.watch import (
    AsyncioScheduler,
    BrowserSource,
    Capability,
    EmissionSink,
    FileSource,
    LiveBoard,
    SourceWatcher,
    detect_capability,
)


class ObservedElement:
    """Source that supports structural observation only."""

    def __init__(self, fen: str) -> None:
        self.fen = fen
        self.observers: list = []
        self.disconnected = 0

    def get_fen(self) -> str:
        return self.fen

    def observe(self, handler):
        self.observers.append(handler)

        def disconnect() -> None:
            self.observers.remove(handler)
            self.disconnected += 1

        return disconnect

    def mutate(self, fen: str, notifications: int = 5) -> None:
        self.fen = fen
        for _ in range(notifications):
            for handler in list(self.observers):
                handler({"type": "attributes"})


class FakeDriver:
    """Selenium-like driver returning a fixed script result."""

    def __init__(self, result) -> None:
        self.result = result
        self.calls: list[tuple] = []

    def execute_script(self, script, *args):
        self.calls.append((script, args))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class TestDetectCapability:
    """Strategy selection order."""

    def test_event_api_wins(self) -> None:
        """A source with on() uses native events even if it can be observed."""

        class Both(ObservedElement):
            def on(self, event, handler) -> None:
                pass

        assert detect_capability(Both(START_FEN)) is Capability.EVENTS
        assert detect_capability(LiveBoard()) is Capability.EVENTS

    def test_observation_before_polling(self) -> None:
        """A source with observe() but no on() uses mutation observation."""
        assert detect_capability(ObservedElement(START_FEN)) is Capability.MUTATIONS

    def test_polling_fallback(self, tmp_path: Path) -> None:
        """Plain sources and non-callable attributes fall back to polling."""

        class NotCallable:
            on = None
            observe = "nope"

            def get_fen(self) -> str:
                return START_FEN

        assert detect_capability(FileSource(tmp_path / "board.fen")) is Capability.POLL
        assert detect_capability(NotCallable()) is Capability.POLL
        assert detect_capability(BrowserSource(FakeDriver(START_FEN))) is Capability.POLL


class TestWatcherStartup:
    """Initial read and lifecycle."""

    def test_start_publishes_initial_position(self, scheduler) -> None:
        """The first readable position is published and recorded."""
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        watcher = SourceWatcher(SequenceSource([START_FEN]), sink, scheduler)

        watcher.start()

        assert published == [START_FEN]
        assert sink.state.last_placement == START_FEN.split()[0]
        assert sink.state.last_active == "w"

    def test_start_without_readable_position(self, scheduler) -> None:
        """An unreadable source publishes nothing at startup."""
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)

        SourceWatcher(SequenceSource([None]), sink, scheduler).start()

        assert published == []
        assert sink.state.last_placement is None

    def test_start_twice_is_a_no_op(self, scheduler) -> None:
        """A second start does not re-publish or re-subscribe."""
        board = LiveBoard()
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        watcher = SourceWatcher(board, sink, scheduler)

        watcher.start()
        watcher.start()

        assert published == [START_FEN]
        assert len(board._handlers["Move"]) == 1

    def test_restart_does_not_republish_unchanged_position(self, scheduler) -> None:
        """Stopping and starting again on an unchanged board publishes nothing new."""
        board = LiveBoard()
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        watcher = SourceWatcher(board, sink, scheduler)

        watcher.start()
        watcher.stop()
        watcher.start()

        assert published == [START_FEN]
        assert len(board._handlers["Move"]) == 1

    def test_restart_publishes_position_changed_while_stopped(self, scheduler) -> None:
        board = LiveBoard()
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        watcher = SourceWatcher(board, sink, scheduler)

        watcher.start()
        watcher.stop()
        board.push_uci("e2e4")
        watcher.start()

        assert published == [START_FEN, board.get_fen()]

    def test_shared_sink_skips_known_initial_position(self, scheduler, sink, emissions) -> None:
        """A position already emitted through the same sink is not published again."""
        SourceWatcher(LiveBoard(), sink, scheduler).start()

        assert emissions == []


class TestEventStrategy:
    """Native board events."""

    def test_move_is_emitted_after_settling(self, scheduler) -> None:
        """A move on an event-capable board is published once."""
        board = LiveBoard()
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        watcher = SourceWatcher(board, sink, scheduler)
        watcher.start()

        board.push_uci("e2e4")
        scheduler.advance(2.0)

        assert published == [START_FEN, board.get_fen()]

    def test_all_board_events_are_watched(self, scheduler) -> None:
        """Undo, reset and load also trigger detection."""
        board = LiveBoard()
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        SourceWatcher(board, sink, scheduler).start()

        board.push_uci("d2d4")
        scheduler.advance(2.0)
        board.pop()
        scheduler.advance(2.0)
        board.set_fen("8/8/8/4k3/8/8/8/4K3 w - - 0 1")
        scheduler.advance(2.0)
        board.reset()
        scheduler.advance(2.0)

        assert len(published) == 5
        assert published[2] == START_FEN
        assert published[-1] == START_FEN

    def test_stop_unsubscribes_and_cancels(self, scheduler) -> None:
        """After stop, board events no longer reach the watcher."""
        board = LiveBoard()
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        watcher = SourceWatcher(board, sink, scheduler)
        watcher.start()

        board.push_uci("e2e4")
        watcher.stop()
        scheduler.advance(2.0)
        board.push_uci("e7e5")
        scheduler.advance(2.0)

        assert published == [START_FEN]
        assert all(not handlers for handlers in board._handlers.values())
        assert scheduler.active_timers == []


class TestMutationStrategy:
    """Structural observation."""

    def test_notification_burst_yields_one_emission(self, scheduler) -> None:
        """Many mutation records for one change publish once."""
        element = ObservedElement(START_FEN)
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        watcher = SourceWatcher(element, sink, scheduler)
        watcher.start()

        element.mutate(f"{EMPTY_BOARD} b", notifications=20)
        scheduler.advance(3.0)

        assert published == [START_FEN, f"{EMPTY_BOARD} b"]
        assert watcher.capability is Capability.MUTATIONS

    def test_stop_disconnects_observer(self, scheduler) -> None:
        element = ObservedElement(START_FEN)
        watcher = SourceWatcher(element, EmissionSink(), scheduler)
        watcher.start()

        watcher.stop()

        assert element.observers == []
        assert element.disconnected == 1


class TestPollStrategy:
    """Fixed-interval polling."""

    def test_file_change_is_detected(self, scheduler, tmp_path: Path) -> None:
        """Polling picks up a rewritten position file exactly once."""
        path = tmp_path / "board.fen"
        path.write_text(START_FEN + "\n")
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        watcher = SourceWatcher(FileSource(path), sink, scheduler)
        watcher.start()

        path.write_text(f"{EMPTY_BOARD} w\n")
        scheduler.advance(1.0)
        assert published == [START_FEN, f"{EMPTY_BOARD} w"]

        scheduler.advance(5.0)
        assert published == [START_FEN, f"{EMPTY_BOARD} w"]

    def test_missing_file_is_not_an_error(self, scheduler, tmp_path: Path) -> None:
        """A file that does not exist yet is just unreadable."""
        path = tmp_path / "later.fen"
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)
        watcher = SourceWatcher(FileSource(path), sink, scheduler)
        watcher.start()
        scheduler.advance(1.0)
        assert published == []

        path.write_text(START_FEN)
        scheduler.advance(1.0)
        assert published == [START_FEN]

    def test_poll_interval_is_configurable(self, scheduler) -> None:
        watcher = SourceWatcher(
            SequenceSource([START_FEN]),
            EmissionSink(),
            scheduler,
            WatcherConfig(poll_interval=2.0),
        )
        watcher.start()

        assert [t.when for t in scheduler.active_timers] == [2.0]

    def test_stop_cancels_poll_timer(self, scheduler) -> None:
        watcher = SourceWatcher(SequenceSource([START_FEN]), EmissionSink(), scheduler)
        watcher.start()
        scheduler.advance(1.0)

        watcher.stop()

        assert scheduler.active_timers == []
        assert not watcher.stabilizer.pending


class TestBrowserSource:
    """WebDriver-backed reads."""

    def test_reads_through_execute_script(self) -> None:
        driver = FakeDriver(START_FEN)
        source = BrowserSource(driver, selector="chess-board")

        assert source.get_fen() == START_FEN
        assert driver.calls[0][1] == ("chess-board",)

    def test_driver_errors_are_contained_by_reader(self, scheduler) -> None:
        published: list[str] = []
        sink = EmissionSink()
        sink.subscribe(published.append)

        SourceWatcher(BrowserSource(FakeDriver(RuntimeError("no such window"))), sink, scheduler).start()
        scheduler.advance(1.0)

        assert published == []


class TestAsyncioScheduler:
    """End to end on a real event loop."""

    def test_live_board_on_event_loop(self) -> None:
        """Settled moves are published through loop.call_later timers."""
        board = LiveBoard()
        published: list[str] = []

        async def run() -> None:
            sink = EmissionSink()
            sink.subscribe(published.append)
            watcher = SourceWatcher(
                board,
                sink,
                AsyncioScheduler(),
                stabilizer_config=StabilizerConfig(settle_delay=0.01, confirm_delay=0.01, max_wait=0.2),
            )
            watcher.start()
            board.push_uci("g1f3")
            await asyncio.sleep(0.3)
            watcher.stop()

        asyncio.run(run())

        expected = chess.Board()
        expected.push_uci("g1f3")
        assert published == [START_FEN, expected.fen()]
