from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .pieces import PieceKind, Side
from .square import Square


class MoveKind(Enum):
    """What a candidate move would be if committed."""

    NORMAL_MOVE = "normal"
    PAWN_HOP = "pawn_hop"
    EN_PASSANT = "en_passant"
    CASTLING = "castling"
    PAWN_PROMOTION = "promotion"
    MOVE_NOT_ALLOWED = "not_allowed"


class MoveStatus(Enum):
    """Fine-grained legality verdict for a candidate move."""

    VALID_MOVE = "valid_move"
    VALID_ATTACK = "valid_attack"
    INVALID_MOVE = "invalid_move"
    INVALID_ATTACK = "invalid_attack"
    CAN_PROTECT_FRIENDLY = "can_protect_friendly"
    KING_ATTACK_KING = "king_attack_king"

    @property
    def is_valid(self) -> bool:
        return self in (MoveStatus.VALID_MOVE, MoveStatus.VALID_ATTACK)

    @property
    def is_move(self) -> bool:
        return self in (MoveStatus.VALID_MOVE, MoveStatus.INVALID_MOVE)

    @property
    def is_attack(self) -> bool:
        return self in (MoveStatus.VALID_ATTACK, MoveStatus.INVALID_ATTACK)

    @staticmethod
    def for_invalid_target(target: Optional[PieceKind]) -> "MoveStatus":
        """Invalid verdict flavoured by whether the target square is occupied."""
        return MoveStatus.INVALID_ATTACK if target is not None else MoveStatus.INVALID_MOVE


@dataclass(frozen=True)
class Move:
    """A requested move between two squares.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square. For castling this is the rook's
            square.
    """

    from_sq: Square
    to_sq: Square

    def to_uci(self) -> str:
        """Serialize the move into long algebraic form.

        Returns:
            str: Move encoded like ``"e2e4"``.
        """
        return str(self.from_sq) + str(self.to_sq)


@dataclass(frozen=True)
class MoveRecord:
    """One executed move in a game's history."""

    side: Side
    from_sq: Square
    to_sq: Square
    kind: MoveKind

    def to_uci(self) -> str:
        return str(self.from_sq) + str(self.to_sq)


def parse_uci(uci: str) -> Move:
    """Parse a long algebraic move string.

    Args:
        uci (str): Move encoded as two square names (e.g. ``"e2e4"``).

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length or squares.
    """
    if not isinstance(uci, str) or len(uci) != 4:
        raise ValueError(f"invalid move string: {uci!r}")
    return Move(Square.parse(uci[0:2]), Square.parse(uci[2:4]))
