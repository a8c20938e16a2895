"""Concrete board sources.

- :class:`FileSource`: a text file another program rewrites (poll only).
- :class:`BrowserSource`: a board widget in a browser driven by a
  Selenium-style WebDriver (poll only; each read is one script round-trip).
- :class:`LiveBoard`: an in-process ``chess.Board`` that raises native
  board events, used by embedding applications and tests.
"""

from collections import defaultdict
from pathlib import Path
from typing import Any, Callable

import chess

BOARD_SELECTOR = "wc-chess-board, chess-board"

# Widget accessor first, then the globals some game pages expose.
GET_FEN_SCRIPT = """
const el = document.querySelector(arguments[0]);
if (el && el.game && typeof el.game.getFEN === 'function') {
    return el.game.getFEN();
}
if (window.chessGame && typeof window.chessGame.getFEN === 'function') {
    return window.chessGame.getFEN();
}
if (window.gameSetup && window.gameSetup.fen) {
    return window.gameSetup.fen;
}
return null;
"""


class FileSource:
    """Read the position from a text file."""

    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding

    def get_fen(self) -> str:
        # A writer that truncates then rewrites can be caught half way;
        # the stabilizer's confirm read takes care of that.
        return self.path.read_text(encoding=self.encoding)


class BrowserSource:
    """Read the position from a board widget through a WebDriver.

    Args:
        driver: Object with ``execute_script(script, *args)``, such as a
            Selenium WebDriver.
        selector: CSS selector of the board element.
    """

    def __init__(self, driver: Any, selector: str = BOARD_SELECTOR) -> None:
        self.driver = driver
        self.selector = selector

    def get_fen(self) -> Any:
        return self.driver.execute_script(GET_FEN_SCRIPT, self.selector)


class LiveBoard:
    """A ``chess.Board`` wrapper that announces changes as board events.

    Mutations fire ``Move``, ``Undo``, ``ResetGame`` or ``LoadFen`` to
    handlers registered with :meth:`on`.
    """

    def __init__(self, fen: str = chess.STARTING_FEN) -> None:
        self.board = chess.Board(fen)
        self._handlers: dict[str, list[Callable[[], None]]] = defaultdict(list)

    def on(self, event: str, handler: Callable[[], None]) -> None:
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Callable[[], None]) -> None:
        if handler in self._handlers[event]:
            self._handlers[event].remove(handler)

    def get_fen(self) -> str:
        return self.board.fen()

    def push_uci(self, uci: str) -> chess.Move:
        move = self.board.push_uci(uci)
        self._fire("Move")
        return move

    def pop(self) -> chess.Move:
        move = self.board.pop()
        self._fire("Undo")
        return move

    def reset(self) -> None:
        self.board.reset()
        self._fire("ResetGame")

    def set_fen(self, fen: str) -> None:
        self.board.set_fen(fen)
        self._fire("LoadFen")

    def _fire(self, event: str) -> None:
        for handler in list(self._handlers[event]):
            handler()
