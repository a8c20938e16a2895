"""UCI engine wrapper for the move-calculation backend.

The engine binary (Stockfish or any other UCI engine) is started once and
kept running for the whole session; every confirmed position on our turn
becomes one ``position fen`` / ``go`` exchange.

Uses pexpect for interactive communication with the subprocess, which
handles PTY allocation and buffering correctly.
"""

import re
import threading
from pathlib import Path

import chess
import pexpect
from loguru import logger

from fenwatch.errors import UCIEngineError

_BESTMOVE_RE = re.compile(r"bestmove\s+(\S+)")


def parse_bestmove(text: str) -> chess.Move | None:
    """Parse the move out of a ``bestmove`` line.

    Returns:
        The move, or None for ``(none)``, ``0000`` or unparsable output.
    """
    match = _BESTMOVE_RE.search(text)
    if not match:
        return None
    move_uci = match.group(1)
    if move_uci in ("(none)", "0000"):
        return None
    try:
        return chess.Move.from_uci(move_uci)
    except ValueError:
        logger.warning(f"Engine returned unparsable move: {move_uci!r}")
        return None


class UCIEngine:
    """UCI protocol wrapper around a long-lived engine process.

    Example:
        with UCIEngine("/usr/bin/stockfish", options={"Skill Level": 10}) as engine:
            move = engine.best_move(fen, depth=4, movetime_ms=1000)
    """

    def __init__(
        self,
        binary_path: str | Path,
        *,
        options: dict[str, int | str] | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the UCI engine.

        Args:
            binary_path: Path to the UCI engine executable.
            options: UCI options sent with ``setoption`` before the first game.
            timeout: Timeout in seconds for UCI responses.
        """
        self.binary_path = Path(binary_path)
        self.options = options or {}
        self.timeout = timeout

        if not self.binary_path.exists():
            raise FileNotFoundError(f"Engine binary not found: {self.binary_path}")

        self._child: pexpect.spawn | None = None
        self._lock = threading.Lock()
        self._start_engine()

    def _start_engine(self) -> None:
        """Start the engine subprocess and configure it."""
        logger.debug(f"Starting UCI engine: {self.binary_path}")

        self._child = pexpect.spawn(
            str(self.binary_path),
            encoding="utf-8",
            timeout=self.timeout,
        )

        self._send_command("uci")
        self._wait_for_response("uciok")

        for name, value in self.options.items():
            self._send_command(f"setoption name {name} value {value}")

        self._send_command("ucinewgame")
        self._send_command("isready")
        self._wait_for_response("readyok")

        logger.info(f"UCI engine ready: {self.name}")

    def _send_command(self, command: str) -> None:
        if self._child is None:
            raise UCIEngineError("Engine not running")

        logger.trace(f"UCI send: {command}")
        self._child.sendline(command)

    def _wait_for_response(self, expected: str) -> str:
        if self._child is None:
            raise UCIEngineError("Engine not running")

        try:
            self._child.expect(expected, timeout=self.timeout)
            return self._child.after
        except pexpect.TIMEOUT:
            raise UCIEngineError(f"Timeout waiting for '{expected}'")
        except pexpect.EOF:
            raise UCIEngineError("Engine process terminated unexpectedly")

    def best_move(self, fen: str, *, depth: int = 4, movetime_ms: int = 1000) -> chess.Move | None:
        """Search ``fen`` and return the engine's best move.

        Args:
            fen: Complete six-field FEN.
            depth: Maximum search depth.
            movetime_ms: Compute budget in milliseconds.

        Returns:
            The best move, or None if the engine reports no move.
        """
        with self._lock:
            self._send_command(f"position fen {fen}")
            self._send_command(f"go depth {depth} movetime {movetime_ms}")

            self._wait_for_response("bestmove")
            if self._child is None:
                return None

            # Rest of the line after "bestmove"
            self._wait_for_response(r"\r?\n")
            return parse_bestmove("bestmove" + (self._child.before or ""))

    def new_game(self) -> None:
        """Tell the engine a new game starts."""
        with self._lock:
            self._send_command("ucinewgame")
            self._send_command("isready")
            self._wait_for_response("readyok")

    def close(self) -> None:
        """Close the engine subprocess."""
        if self._child is None:
            return
        try:
            self._send_command("quit")
            self._child.wait()
        except (UCIEngineError, pexpect.ExceptionPexpect, OSError) as e:
            logger.debug(f"Engine did not quit cleanly ({e}), terminating")
            self._child.terminate(force=True)
        finally:
            self._child = None

    def __enter__(self) -> "UCIEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def name(self) -> str:
        return f"UCI({self.binary_path.name})"
