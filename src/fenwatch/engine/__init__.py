"""Move-calculation backend: UCI engine process and async driver."""

from fenwatch.engine.driver import AutoMover, EngineDriver, MoveEngine
from fenwatch.engine.uci_engine import UCIEngine, parse_bestmove
from fenwatch.errors import UCIEngineError

__all__ = [
    "AutoMover",
    "EngineDriver",
    "MoveEngine",
    "UCIEngine",
    "UCIEngineError",
    "parse_bestmove",
]
