from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from .errors import InvariantViolation
from .move import MoveRecord
from .pieces import PieceKind, PieceType, Side
from .square import Square


logger = logging.getLogger(__name__)


CASTLING_ORDER = "KQkq"

BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class Wing(Enum):
    KING_SIDE = "king_side"
    QUEEN_SIDE = "queen_side"


_CASTLING_LETTERS: Dict[Tuple[Side, Wing], str] = {
    (Side.WHITE, Wing.KING_SIDE): "K",
    (Side.WHITE, Wing.QUEEN_SIDE): "Q",
    (Side.BLACK, Wing.KING_SIDE): "k",
    (Side.BLACK, Wing.QUEEN_SIDE): "q",
}

# (side, wing) -> (king landing, rook landing); independent of the rook's file.
CASTLING_LANDINGS: Dict[Tuple[Side, Wing], Tuple[Square, Square]] = {
    (Side.WHITE, Wing.KING_SIDE): (Square.G1, Square.F1),
    (Side.WHITE, Wing.QUEEN_SIDE): (Square.C1, Square.D1),
    (Side.BLACK, Wing.KING_SIDE): (Square.G8, Square.F8),
    (Side.BLACK, Wing.QUEEN_SIDE): (Square.C8, Square.D8),
}

# Rook home corners; moving or capturing a rook here revokes that wing.
ROOK_CORNERS: Dict[Square, Tuple[Side, Wing]] = {
    Square.A1: (Side.WHITE, Wing.QUEEN_SIDE),
    Square.H1: (Side.WHITE, Wing.KING_SIDE),
    Square.A8: (Side.BLACK, Wing.QUEEN_SIDE),
    Square.H8: (Side.BLACK, Wing.KING_SIDE),
}


def castling_letter(side: Side, wing: Wing) -> str:
    return _CASTLING_LETTERS[(side, wing)]


def normalize_castling(rights: str) -> str:
    """Return ``rights`` reduced to the canonical ``KQkq`` ordering."""
    return "".join(c for c in CASTLING_ORDER if c in rights)


def _zero_counters() -> Dict[Side, int]:
    return {Side.WHITE: 0, Side.BLACK: 0}


def _check_entry(sq, piece) -> None:
    if not isinstance(sq, Square) or not isinstance(piece, PieceKind):
        logger.error("corrupted board entry %r -> %r", sq, piece)
        raise InvariantViolation(f"unrecognized placement entry {sq!r}: {piece!r}")


@dataclass
class BoardState:
    """Authoritative game snapshot.

    Notes:
    - ``placement`` maps occupied squares to their piece; empty squares are
      absent.
    - ``castling`` is a subset of ``"KQkq"``; letters are only ever removed.
    - ``history`` is append-only and its length always equals
      ``total_moves``.
    - :meth:`clone` shares no mutable container with the original, so a
      what-if copy can be mutated and dropped freely.
    """

    placement: Dict[Square, PieceKind] = field(default_factory=dict)
    active_side: Side = Side.WHITE
    castling: str = CASTLING_ORDER
    moved: Set[Square] = field(default_factory=set)
    pawn_double_stepped: Set[Square] = field(default_factory=set)
    piece_turns: Dict[Square, int] = field(default_factory=dict, repr=False)
    turn_counters: Dict[Side, int] = field(default_factory=_zero_counters)
    total_moves: int = 0
    history: List[MoveRecord] = field(default_factory=list, repr=False)
    score: Dict[Side, int] = field(default_factory=_zero_counters)
    paused: bool = False
    drawn: bool = False
    pending_promotion: Optional[Square] = None

    @classmethod
    def standard(cls) -> "BoardState":
        """Create a board in the standard starting layout."""
        placement: Dict[Square, PieceKind] = {}
        for file_idx, piece_type in enumerate(BACK_RANK):
            placement[Square.at(file_idx, 0)] = PieceKind.of(Side.WHITE, piece_type)
            placement[Square.at(file_idx, 1)] = PieceKind.W_PAWN
            placement[Square.at(file_idx, 6)] = PieceKind.B_PAWN
            placement[Square.at(file_idx, 7)] = PieceKind.of(Side.BLACK, piece_type)
        return cls(placement=placement)

    # --- Element access ---

    def piece_at(self, sq: Optional[Square]) -> Optional[PieceKind]:
        """Return the piece on ``sq``, or None when it is empty.

        Raises:
            InvariantViolation: If the square holds something other than a
                piece kind.
        """
        if sq is None:
            return None
        piece = self.placement.get(sq)
        if piece is not None:
            _check_entry(sq, piece)
        return piece

    def is_empty(self, sq: Square) -> bool:
        return sq not in self.placement

    def pieces(self, side: Optional[Side] = None) -> List[Tuple[Square, PieceKind]]:
        """Occupied squares (optionally for one side) in square order.

        Raises:
            InvariantViolation: If any entry is not a square mapped to a piece
                kind.
        """
        for sq, piece in self.placement.items():
            _check_entry(sq, piece)
        return [
            (sq, piece)
            for sq, piece in sorted(self.placement.items(), key=lambda item: item[0].value)
            if side is None or piece.side is side
        ]

    def king_square(self, side: Side) -> Optional[Square]:
        """Return the square of ``side``'s king, or None when it has none.

        Raises:
            InvariantViolation: If ``side`` has more than one king.
        """
        kings = [
            sq
            for sq, piece in self.placement.items()
            if piece in (PieceKind.W_KING, PieceKind.B_KING) and piece.side is side
        ]
        if len(kings) > 1:
            logger.error("corrupted board: %d %s kings", len(kings), side)
            raise InvariantViolation(f"more than one {side} king on the board")
        return kings[0] if kings else None

    # --- Castling rights ---

    def has_castling(self, side: Side, wing: Wing) -> bool:
        return castling_letter(side, wing) in self.castling

    def revoke_castling(self, side: Side, wing: Optional[Wing] = None) -> None:
        wings = (Wing.KING_SIDE, Wing.QUEEN_SIDE) if wing is None else (wing,)
        revoked = {castling_letter(side, w) for w in wings}
        self.castling = "".join(c for c in self.castling if c not in revoked)

    # --- Mutation / copying ---

    def relocate(self, from_sq: Square, to_sq: Square) -> Optional[PieceKind]:
        """Move whatever stands on ``from_sq`` to ``to_sq`` with no bookkeeping.

        Returns:
            Optional[PieceKind]: The piece previously on ``to_sq``, if any.
        """
        piece = self.placement.pop(from_sq, None)
        captured = self.placement.pop(to_sq, None)
        if piece is not None:
            self.placement[to_sq] = piece
        return captured

    def clone(self) -> "BoardState":
        return BoardState(
            placement=dict(self.placement),
            active_side=self.active_side,
            castling=self.castling,
            moved=set(self.moved),
            pawn_double_stepped=set(self.pawn_double_stepped),
            piece_turns=dict(self.piece_turns),
            turn_counters=dict(self.turn_counters),
            total_moves=self.total_moves,
            history=list(self.history),
            score=dict(self.score),
            paused=self.paused,
            drawn=self.drawn,
            pending_promotion=self.pending_promotion,
        )

    def validate(self) -> None:
        """Check structural invariants.

        Raises:
            InvariantViolation: If a square maps to something other than a
                piece kind, a key is not a square, or a side has two kings.
        """
        for sq, piece in self.placement.items():
            _check_entry(sq, piece)
        for side in Side:
            self.king_square(side)
