"""Attack geometry and king safety.

Everything here runs on raw attack geometry from a geometry-only
:class:`~.rules.Rulebook`; nothing calls back into full legality, which is
what keeps king-safety checks from recursing.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional, Set

from .board import BoardState
from .pieces import PieceType, Side
from .rules import Rulebook
from .square import Square

if TYPE_CHECKING:
    from .validator import MoveValidator


class KingStatus(Enum):
    OK = "ok"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


class CheckAnalyzer:
    def __init__(self, geometry: Optional[Rulebook] = None) -> None:
        self._geometry = geometry if geometry is not None else Rulebook()

    def attackers_of(self, square: Square, by_side: Side, board: BoardState) -> Set[Square]:
        """Squares of ``by_side`` pieces whose raw geometry reaches ``square``.

        Turn order and the attackers' own king safety are ignored.
        """
        return {
            origin
            for origin, piece in board.pieces(by_side)
            if origin is not square and self._geometry.reaches(origin, square, board)
        }

    def is_king_in_check(self, side: Side, board: BoardState) -> bool:
        king_sq = board.king_square(side)
        if king_sq is None:
            return False
        return bool(self.attackers_of(king_sq, side.other, board))

    def would_expose_king(
        self, from_sq: Square, to_sq: Square, side: Side, board: BoardState
    ) -> bool:
        """Whether moving ``from_sq`` -> ``to_sq`` leaves ``side``'s king attacked.

        The move is applied to a throwaway clone as a bare relocation (plus
        removal of a pawn taken en passant); no rights or counters change.
        An empty origin is treated as exposing, so callers fail closed.
        """
        mover = board.piece_at(from_sq)
        if mover is None or to_sq is None:
            return True
        what_if = board.clone()
        if (
            mover.is_type(PieceType.PAWN)
            and from_sq.file != to_sq.file
            and what_if.is_empty(to_sq)
        ):
            what_if.placement.pop(Square.at(to_sq.file, from_sq.rank), None)
        what_if.relocate(from_sq, to_sq)
        return self.is_king_in_check(side, what_if)

    def king_status(
        self, side: Side, board: BoardState, validator: "MoveValidator"
    ) -> KingStatus:
        """Classify ``side``'s king.

        ``validator`` supplies full legal-move enumeration; it is passed per
        call rather than held, so the analyzer never owns the validator.
        """
        in_check = self.is_king_in_check(side, board)
        has_moves = validator.has_any_legal_move(side, board)
        if in_check:
            return KingStatus.CHECK if has_moves else KingStatus.CHECKMATE
        return KingStatus.OK if has_moves else KingStatus.STALEMATE
