"""Core types shared by the watcher, the feed and the engine driver."""

from fenwatch.core.position import (
    FIELD_COUNT,
    UNKNOWN_ACTIVE,
    NormalizedPosition,
    active_from_ply,
    complete_fen,
    normalize,
)

__all__ = [
    "FIELD_COUNT",
    "UNKNOWN_ACTIVE",
    "NormalizedPosition",
    "active_from_ply",
    "complete_fen",
    "normalize",
]
