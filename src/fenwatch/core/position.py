"""Position strings: field normalization and FEN completion.

Live boards rarely hand out a complete six-field FEN. Widgets often report
only the piece placement and the side to move, and push feeds send the
placement alone. :func:`normalize` turns any such string into a record with
exactly six named fields so change detection can compare the fields it
cares about. :func:`complete_fen` produces a string the engine accepts.
"""

from dataclasses import dataclass

FIELD_COUNT = 6

UNKNOWN_ACTIVE = "?"
FILLER = "-"

# Defaults applied positionally to missing trailing fields
_DEFAULTS = (None, UNKNOWN_ACTIVE, FILLER, FILLER, "0", "1")


@dataclass(frozen=True)
class NormalizedPosition:
    """A position string split into its six canonical FEN fields.

    Attributes:
        placement: Piece layout token.
        active: Side to move, ``"?"`` when the source did not report it.
        castling: Castling rights, ``"-"`` when missing.
        en_passant: En-passant target square, ``"-"`` when missing.
        halfmove: Halfmove clock, ``"0"`` when missing.
        fullmove: Fullmove number, ``"1"`` when missing.
        raw: The source string exactly as read, for re-transmission.
    """

    placement: str
    active: str
    castling: str
    en_passant: str
    halfmove: str
    fullmove: str
    raw: str

    @property
    def fields(self) -> tuple[str, str, str, str, str, str]:
        """The six fields in FEN order."""
        return (
            self.placement,
            self.active,
            self.castling,
            self.en_passant,
            self.halfmove,
            self.fullmove,
        )

    @property
    def key(self) -> tuple[str, str]:
        """The fields that identify a position for change detection.

        Clocks, castling and en-passant are left out: widgets update them
        lazily and they never distinguish a move on their own.
        """
        return (self.placement, self.active)

    @property
    def turn_known(self) -> bool:
        return self.active in ("w", "b")

    def __str__(self) -> str:
        return " ".join(self.fields)


def normalize(raw: str | None) -> NormalizedPosition | None:
    """Split a raw position string into six fields.

    Args:
        raw: Position string from a live source. May be ``None``, empty, or
            carry anywhere from one to six (or more) whitespace-separated
            fields. Tokens past the sixth are ignored.

    Returns:
        NormalizedPosition, or None if there is nothing to normalize.
    """
    if not raw:
        return None

    tokens = raw.split()
    if not tokens:
        return None

    parts = tokens[:FIELD_COUNT]
    parts.extend(_DEFAULTS[len(parts):])

    placement, active, castling, en_passant, halfmove, fullmove = parts
    return NormalizedPosition(
        placement=placement,
        active=active,
        castling=castling,
        en_passant=en_passant,
        halfmove=halfmove,
        fullmove=fullmove,
        raw=raw,
    )


def active_from_ply(ply: int) -> str:
    """Side to move after ``ply`` half-moves: even is white, odd is black."""
    return "w" if ply % 2 == 0 else "b"


def complete_fen(
    raw: str | None,
    active_default: str = "w",
    castling_default: str = "KQkq",
) -> str | None:
    """Complete a partial position string into a full six-field FEN.

    Unlike :func:`normalize`, the result is meant for an engine, so the
    side to move falls back to a real colour and castling rights fall back
    to full rights. An unknown active colour (``"?"``) is replaced too.

    Args:
        raw: Partial position string (typically placement plus turn).
        active_default: Side to move when missing or unknown.
        castling_default: Castling rights when missing.

    Returns:
        Complete FEN string, or None for empty input.
    """
    position = normalize(raw)
    if position is None:
        return None

    tokens = raw.split()  # type: ignore[union-attr]
    active = position.active if position.turn_known else active_default
    castling = position.castling if len(tokens) > 2 else castling_default

    return " ".join(
        (
            position.placement,
            active,
            castling,
            position.en_passant,
            position.halfmove,
            position.fullmove,
        )
    )
