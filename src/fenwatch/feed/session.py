"""Per-game state tracked from the push feed."""

from dataclasses import dataclass


@dataclass
class GameSession:
    """What the feed has told us about the current game."""

    game_id: str | None = None
    is_white: bool | None = None
    current_fen: str | None = None
    best_move: str | None = None

    def is_our_turn(self, active: str) -> bool:
        """True if ``active`` is our colour. False while the colour is unknown."""
        if self.is_white is None or active not in ("w", "b"):
            return False
        return (active == "w") == self.is_white

    def reset(self) -> None:
        self.game_id = None
        self.is_white = None
        self.current_fen = None
        self.best_move = None
