"""Position Reader: pull a raw position string from a live source."""

from typing import Any, Protocol

from loguru import logger


class BoardSource(Protocol):
    """Anything that can report the position currently on the board.

    Sources may additionally expose ``on(event, handler)`` /
    ``off(event, handler)`` for native board events, or
    ``observe(handler) -> disconnect`` for structural change notifications.
    See :mod:`fenwatch.watch.watcher` for how those are picked.
    """

    def get_fen(self) -> Any: ...


class PositionReader:
    """Read the live source, turning every failure into ``None``.

    The board behind a source is mutated by someone else: the element may
    not exist yet, the accessor may be missing, or the read may throw while
    the widget is re-rendering. None of that is an error for the watcher;
    it just means there is no data this time.
    """

    def __init__(self, source: BoardSource) -> None:
        self.source = source

    def read(self) -> str | None:
        """Return the stripped position string, or None if unreadable."""
        try:
            fen = self.source.get_fen()
        except Exception as e:
            logger.trace(f"Source read failed: {e!r}")
            return None

        if not isinstance(fen, str):
            return None
        fen = fen.strip()
        return fen or None
