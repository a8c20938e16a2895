"""Push-feed handling: the direct path from network messages to the sink.

Positions carried by the feed are complete snapshots, so they skip the
settle/confirm protocol and are emitted as soon as they arrive. Only the
message types needed to drive the game session are interpreted:

- ``gameFull``: game id and our colour;
- ``gameState``: a status at or above the end threshold ends the game;
- ``d`` / ``move``: a new position (``d.fen``) and ply count (``d.ply``).
"""

import asyncio
import json
from functools import partial
from typing import Any, Awaitable, Callable

from loguru import logger

from fenwatch.core.configs.schema import FeedConfig
from fenwatch.core.position import active_from_ply, complete_fen, normalize
from fenwatch.feed.session import GameSession
from fenwatch.watch.sink import EmissionSink

TurnCallback = Callable[[str], Awaitable[Any]]


class FeedHandler:
    """Interpret inbound feed messages.

    Args:
        sink: Sink that publishes feed positions.
        session: Game session to update.
        config: Feed configuration.
        on_our_turn: Coroutine function called with the completed FEN when
            auto-move is enabled and it is our turn.
        on_game_end: Coroutine function called once a game has ended.
    """

    def __init__(
        self,
        sink: EmissionSink,
        session: GameSession | None = None,
        config: FeedConfig | None = None,
        on_our_turn: TurnCallback | None = None,
        on_game_end: Callable[[], Awaitable[Any]] | None = None,
    ) -> None:
        self.sink = sink
        self.session = session if session is not None else GameSession()
        self.config = config or FeedConfig()
        self.on_our_turn = on_our_turn
        self.on_game_end = on_game_end
        self._tasks: set[asyncio.Task] = set()

    def handle_message(self, text: str) -> None:
        """Process one raw inbound frame. Unrelated frames are ignored."""
        try:
            message = json.loads(text)
        except (TypeError, ValueError):
            logger.trace(f"Ignoring non-JSON frame: {text!r:.80}")
            return
        if not isinstance(message, dict):
            return

        kind = message.get("t") or message.get("type")
        data = message.get("d")
        if not isinstance(data, dict):
            data = {}

        if kind == "gameFull":
            self._on_game_full(message, data)
        elif kind == "gameState":
            self._on_game_state(message, data)
        elif kind in ("d", "move"):
            self._on_position(data)

    def _on_game_full(self, message: dict[str, Any], data: dict[str, Any]) -> None:
        game_id = message.get("id") or data.get("id")
        if game_id:
            self.session.game_id = str(game_id)
            logger.info(f"Game ID set: {self.session.game_id}")

        player = data.get("player")
        if isinstance(player, dict) and player.get("color"):
            self.session.is_white = player["color"] == "white"
            logger.info(f"Playing as: {'white' if self.session.is_white else 'black'}")

    def _on_game_state(self, message: dict[str, Any], data: dict[str, Any]) -> None:
        status = message.get("status") or data.get("status")
        if isinstance(status, int) and status >= self.config.game_end_status:
            logger.info(f"Game {self.session.game_id} ended (status {status})")
            self.session.reset()
            if self.on_game_end is not None:
                self._spawn(self.on_game_end, "engine reset")

    def _on_position(self, data: dict[str, Any]) -> None:
        fen = data.get("fen")
        if not isinstance(fen, str):
            return
        fen = fen.strip()
        if not fen:
            return

        # Feed positions usually carry the placement only
        ply = data.get("ply")
        if len(fen.split()) < 2 and isinstance(ply, int) and not isinstance(ply, bool):
            fen = f"{fen} {active_from_ply(ply)}"

        position = normalize(fen)
        if position is None:
            return

        self.sink.emit(position)
        self.session.current_fen = complete_fen(fen)

        if self.config.automove and self.session.is_our_turn(position.active) and self.on_our_turn is not None:
            self._spawn(partial(self.on_our_turn, self.session.current_fen), "move request")

    def _spawn(self, factory: Callable[[], Awaitable[Any]], what: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, {what} skipped")
            return

        task = loop.create_task(factory())
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"Feed task failed: {exc!r}")

    async def drain(self) -> None:
        """Wait for outstanding feed tasks to finish.

        Task failures are logged when they happen and do not propagate.
        """
        while self._tasks:
            tasks = list(self._tasks)
            self._tasks.difference_update(tasks)
            await asyncio.gather(*tasks, return_exceptions=True)
