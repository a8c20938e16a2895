"""Async engine driver and the auto-move coordinator."""

import asyncio
from functools import partial
from typing import Protocol

import chess
from loguru import logger

from fenwatch.core.configs.schema import MOVETIME_MS, SEARCH_DEPTH
from fenwatch.errors import UCIEngineError
from fenwatch.feed.channel import MoveSender
from fenwatch.feed.session import GameSession


class MoveEngine(Protocol):
    """Blocking move-calculation backend (see UCIEngine)."""

    def best_move(self, fen: str, *, depth: int, movetime_ms: int) -> chess.Move | None: ...

    def new_game(self) -> None: ...


class EngineDriver:
    """Run a blocking engine off the event loop.

    The engine call happens in the loop's default executor; the result is
    delivered back on the loop as a UCI move string.
    """

    def __init__(
        self,
        engine: MoveEngine,
        depth: int = SEARCH_DEPTH,
        movetime_ms: int = MOVETIME_MS,
    ) -> None:
        self.engine = engine
        self.depth = depth
        self.movetime_ms = movetime_ms

    async def request_move(self, fen: str) -> str | None:
        """Ask the engine for a move.

        Returns:
            UCI move string, or None if there is no move or the engine failed.
        """
        loop = asyncio.get_running_loop()
        call = partial(self.engine.best_move, fen, depth=self.depth, movetime_ms=self.movetime_ms)
        try:
            move = await loop.run_in_executor(None, call)
        except UCIEngineError as e:
            logger.warning(f"Engine unavailable: {e}")
            return None

        if move is None:
            logger.info(f"Engine has no move for {fen}")
            return None
        return move.uci()

    async def new_game(self) -> None:
        """Reset the engine between games."""
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.engine.new_game)
        except UCIEngineError as e:
            logger.warning(f"Engine reset failed: {e}")


class AutoMover:
    """Play the engine's move whenever the feed says it is our turn."""

    def __init__(self, driver: EngineDriver, sender: MoveSender, session: GameSession) -> None:
        self.driver = driver
        self.sender = sender
        self.session = session

    async def on_turn(self, fen: str) -> str | None:
        """Compute and submit a move for ``fen``.

        The move is dropped if the game moved on while the engine was
        thinking.

        Returns:
            The submitted move, or None if nothing was sent.
        """
        move = await self.driver.request_move(fen)
        if move is None:
            return None

        if self.session.current_fen != fen:
            logger.debug(f"Position changed while thinking, dropping {move}")
            return None

        self.session.best_move = move
        if not self.sender.submit(move):
            return None
        return move

    async def on_game_end(self) -> None:
        """Start a fresh engine game once the feed reports the end."""
        await self.driver.new_game()
