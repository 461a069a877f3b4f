"""Sides, piece types and side-bound piece kinds."""

from __future__ import annotations

from enum import Enum


class Side(Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def other(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE

    @property
    def home_rank(self) -> int:
        """Rank index of the side's back rank."""
        return 0 if self is Side.WHITE else 7

    @property
    def pawn_direction(self) -> int:
        return 1 if self is Side.WHITE else -1

    def __str__(self) -> str:
        return self.name.lower()


class PieceType(Enum):
    KING = "k"
    QUEEN = "q"
    ROOK = "r"
    BISHOP = "b"
    KNIGHT = "n"
    PAWN = "p"

    @property
    def points(self) -> int:
        """Material value awarded when a piece of this type is captured."""
        return _POINTS[self]


_POINTS = {
    PieceType.KING: 0,
    PieceType.QUEEN: 9,
    PieceType.ROOK: 5,
    PieceType.BISHOP: 3,
    PieceType.KNIGHT: 3,
    PieceType.PAWN: 1,
}

PROMOTION_TYPES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)


class PieceKind(Enum):
    """A piece type bound to its side; the value is its layout character."""

    W_KING = "K"
    W_QUEEN = "Q"
    W_ROOK = "R"
    W_BISHOP = "B"
    W_KNIGHT = "N"
    W_PAWN = "P"
    B_KING = "k"
    B_QUEEN = "q"
    B_ROOK = "r"
    B_BISHOP = "b"
    B_KNIGHT = "n"
    B_PAWN = "p"

    @property
    def side(self) -> Side:
        return Side.WHITE if self.value.isupper() else Side.BLACK

    @property
    def type(self) -> PieceType:
        return PieceType(self.value.lower())

    @property
    def points(self) -> int:
        return self.type.points

    @classmethod
    def of(cls, side: Side, piece_type: PieceType) -> "PieceKind":
        char = piece_type.value
        return cls(char.upper() if side is Side.WHITE else char)

    @classmethod
    def from_char(cls, char: str) -> "PieceKind":
        """Create a piece kind from its layout character, e.g. ``'N'``."""
        try:
            return cls(char)
        except ValueError:
            raise ValueError(f"invalid piece character: {char!r}") from None

    def is_side(self, side: Side) -> bool:
        return self.side is side

    def is_type(self, piece_type: PieceType) -> bool:
        return self.type is piece_type

    def __str__(self) -> str:
        return self.value
