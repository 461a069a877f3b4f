"""Per-piece movement rules.

Every rule answers three questions about a candidate move on a board
snapshot, none of which looks at whose turn it is:

- :meth:`MoveRule.reaches` - raw attack geometry. Ignores what stands on the
  destination and never consults king safety, so check detection can call it
  without recursing into full legality.
- :meth:`MoveRule.status` - shape verdict as a :class:`MoveStatus`.
- :meth:`MoveRule.kind` - what the move would be (:class:`MoveKind`).

King safety is layered on top by :class:`~.validator.MoveValidator`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .board import CASTLING_LANDINGS, BoardState, Wing
from .errors import InvariantViolation
from .move import MoveKind, MoveStatus
from .pieces import PieceKind, PieceType, Side
from .square import Square

if TYPE_CHECKING:
    from .check import CheckAnalyzer


KNIGHT_DELTAS = frozenset({(1, 2), (2, 1)})


def castling_wing(king_sq: Square, rook_sq: Square) -> Wing:
    return Wing.KING_SIDE if rook_sq.file > king_sq.file else Wing.QUEEN_SIDE


def castling_landings(side: Side, king_sq: Square, rook_sq: Square) -> Tuple[Square, Square]:
    """Return (king landing, rook landing) for a king-to-rook castling request."""
    return CASTLING_LANDINGS[(side, castling_wing(king_sq, rook_sq))]


def _disambiguate(mover: PieceKind, target: Optional[PieceKind]) -> MoveStatus:
    if target is None:
        return MoveStatus.VALID_MOVE
    if target.side is mover.side:
        return MoveStatus.CAN_PROTECT_FRIENDLY
    return MoveStatus.VALID_ATTACK


def _path_clear(from_sq: Square, to_sq: Square, board: BoardState) -> bool:
    return all(board.is_empty(sq) for sq in from_sq.between(to_sq))


def _travel(from_sq: Square, to_sq: Square) -> List[Square]:
    """Squares crossed moving ``from_sq`` -> ``to_sq``, destination included."""
    if from_sq is to_sq:
        return []
    return from_sq.between(to_sq) + [to_sq]


class MoveRule(ABC):
    """Movement geometry for one piece type."""

    @abstractmethod
    def reaches(self, from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        """Whether the piece on ``from_sq`` attacks ``to_sq`` geometrically."""

    def status(self, from_sq: Square, to_sq: Square, board: BoardState) -> MoveStatus:
        mover = board.piece_at(from_sq)
        target = board.piece_at(to_sq)
        if mover is None or to_sq is None or from_sq is to_sq:
            return MoveStatus.for_invalid_target(target)
        return self._status(mover, from_sq, to_sq, board)

    def kind(self, from_sq: Square, to_sq: Square, board: BoardState) -> MoveKind:
        if self.status(from_sq, to_sq, board).is_valid:
            return MoveKind.NORMAL_MOVE
        return MoveKind.MOVE_NOT_ALLOWED

    def _status(
        self, mover: PieceKind, from_sq: Square, to_sq: Square, board: BoardState
    ) -> MoveStatus:
        target = board.piece_at(to_sq)
        if not self.reaches(from_sq, to_sq, board):
            return MoveStatus.for_invalid_target(target)
        return _disambiguate(mover, target)


class KnightRule(MoveRule):
    def reaches(self, from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        delta = (abs(from_sq.file_delta(to_sq)), abs(from_sq.rank_delta(to_sq)))
        return delta in KNIGHT_DELTAS


class BishopRule(MoveRule):
    def reaches(self, from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        return from_sq.is_diagonal_to(to_sq) and _path_clear(from_sq, to_sq, board)


class RookRule(MoveRule):
    def reaches(self, from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        return from_sq.is_orthogonal_to(to_sq) and _path_clear(from_sq, to_sq, board)


class QueenRule(MoveRule):
    """Union of rook and bishop geometry."""

    def __init__(self) -> None:
        self._rook = RookRule()
        self._bishop = BishopRule()

    def reaches(self, from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        return self._rook.reaches(from_sq, to_sq, board) or self._bishop.reaches(
            from_sq, to_sq, board
        )


class PawnRule(MoveRule):
    """Forward pushes, the initial hop, diagonal captures and en passant."""

    def reaches(self, from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        mover = board.piece_at(from_sq)
        if mover is None:
            return False
        return (
            abs(from_sq.file_delta(to_sq)) == 1
            and from_sq.rank_delta(to_sq) == mover.side.pawn_direction
        )

    def kind(self, from_sq: Square, to_sq: Square, board: BoardState) -> MoveKind:
        if not self.status(from_sq, to_sq, board).is_valid:
            return MoveKind.MOVE_NOT_ALLOWED
        mover = board.piece_at(from_sq)
        if mover is None:
            return MoveKind.MOVE_NOT_ALLOWED
        if to_sq.rank == mover.side.other.home_rank:
            return MoveKind.PAWN_PROMOTION
        if abs(from_sq.rank_delta(to_sq)) == 2:
            return MoveKind.PAWN_HOP
        if from_sq.file != to_sq.file and board.is_empty(to_sq):
            return MoveKind.EN_PASSANT
        return MoveKind.NORMAL_MOVE

    def _status(
        self, mover: PieceKind, from_sq: Square, to_sq: Square, board: BoardState
    ) -> MoveStatus:
        side = mover.side
        direction = side.pawn_direction
        df = from_sq.file_delta(to_sq)
        dr = from_sq.rank_delta(to_sq)
        target = board.piece_at(to_sq)

        if df == 0 and dr == direction:
            return MoveStatus.VALID_MOVE if target is None else MoveStatus.INVALID_ATTACK

        if df == 0 and dr == 2 * direction:
            if self._can_hop(from_sq, to_sq, side, board):
                return MoveStatus.VALID_MOVE
            return MoveStatus.for_invalid_target(target)

        if abs(df) == 1 and dr == direction:
            if target is None:
                if self._is_en_passant(from_sq, to_sq, side, board):
                    return MoveStatus.VALID_ATTACK
                return MoveStatus.INVALID_MOVE
            return _disambiguate(mover, target)

        return MoveStatus.for_invalid_target(target)

    @staticmethod
    def _can_hop(from_sq: Square, to_sq: Square, side: Side, board: BoardState) -> bool:
        start_rank = 1 if side is Side.WHITE else 6
        return (
            from_sq.rank == start_rank
            and from_sq not in board.moved
            and board.is_empty(to_sq)
            and _path_clear(from_sq, to_sq, board)
        )

    @staticmethod
    def _is_en_passant(from_sq: Square, to_sq: Square, side: Side, board: BoardState) -> bool:
        passed = Square.at(to_sq.file, from_sq.rank)
        victim = board.piece_at(passed)
        if victim is not PieceKind.of(side.other, PieceType.PAWN):
            return False
        if passed not in board.pawn_double_stepped:
            return False
        # The hop must have been the immediately preceding ply.
        last_ply = board.total_moves - 1
        return board.piece_turns.get(passed, last_ply) == last_ply


class KingRule(MoveRule):
    """One step in any direction, or castling toward a same-side rook.

    Castling needs raw attack geometry; the analyzer is injected after the
    geometry-only rulebook it depends on has been built. Without one, every
    castling request is refused.
    """

    def __init__(self, analyzer: Optional["CheckAnalyzer"] = None) -> None:
        self._analyzer = analyzer

    def reaches(self, from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        return from_sq.distance(to_sq) == 1

    def kind(self, from_sq: Square, to_sq: Square, board: BoardState) -> MoveKind:
        if self._is_castling_request(from_sq, to_sq, board):
            if self._castling_allowed(from_sq, to_sq, board):
                return MoveKind.CASTLING
            return MoveKind.MOVE_NOT_ALLOWED
        return super().kind(from_sq, to_sq, board)

    def _status(
        self, mover: PieceKind, from_sq: Square, to_sq: Square, board: BoardState
    ) -> MoveStatus:
        target = board.piece_at(to_sq)
        if self._is_castling_request(from_sq, to_sq, board):
            if self._castling_allowed(from_sq, to_sq, board):
                return MoveStatus.VALID_MOVE
            return MoveStatus.for_invalid_target(target)
        if from_sq.distance(to_sq) != 1:
            return MoveStatus.for_invalid_target(target)
        if target is not None and target.side is not mover.side and target.is_type(PieceType.KING):
            return MoveStatus.KING_ATTACK_KING
        return _disambiguate(mover, target)

    @staticmethod
    def _is_castling_request(from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        king = board.piece_at(from_sq)
        rook = board.piece_at(to_sq)
        if king is None or rook is None:
            return False
        return (
            king.is_type(PieceType.KING)
            and rook is PieceKind.of(king.side, PieceType.ROOK)
            and from_sq.rank == to_sq.rank == king.side.home_rank
            and abs(from_sq.file_delta(to_sq)) in (3, 4)
        )

    def _castling_allowed(self, king_sq: Square, rook_sq: Square, board: BoardState) -> bool:
        """Rights, unmoved pieces, free paths and landings, no attacked king square.

        The king may not start on, cross or land on an attacked square. With a
        custom layout the fixed landings can lie outside the king-rook span, so
        both travel paths are checked for occupancy on their own.
        """
        king = board.piece_at(king_sq)
        if king is None or self._analyzer is None:
            return False
        side = king.side
        wing = castling_wing(king_sq, rook_sq)

        if not board.has_castling(side, wing):
            return False
        if king_sq in board.moved or rook_sq in board.moved:
            return False
        if not _path_clear(king_sq, rook_sq, board):
            return False

        king_landing, rook_landing = castling_landings(side, king_sq, rook_sq)
        king_path = _travel(king_sq, king_landing)
        vacated = (king_sq, rook_sq)
        for sq in king_path + _travel(rook_sq, rook_landing):
            if sq not in vacated and not board.is_empty(sq):
                return False
        return not any(
            self._analyzer.attackers_of(sq, side.other, board)
            for sq in [king_sq] + king_path
        )


class Rulebook:
    """Closed registry of one rule per piece type.

    Built in two phases: a geometry-only book (no analyzer, castling always
    refused) feeds the :class:`~.check.CheckAnalyzer`, and
    :meth:`with_analyzer` then yields the full book used for legality.
    """

    def __init__(self, analyzer: Optional["CheckAnalyzer"] = None) -> None:
        self._rules: Dict[PieceType, MoveRule] = {
            PieceType.KING: KingRule(analyzer),
            PieceType.QUEEN: QueenRule(),
            PieceType.ROOK: RookRule(),
            PieceType.BISHOP: BishopRule(),
            PieceType.KNIGHT: KnightRule(),
            PieceType.PAWN: PawnRule(),
        }

    def with_analyzer(self, analyzer: "CheckAnalyzer") -> "Rulebook":
        return Rulebook(analyzer)

    def rule_for(self, piece: PieceKind) -> MoveRule:
        """Return the rule for ``piece``.

        Raises:
            InvariantViolation: If ``piece`` is not a recognized piece kind.
        """
        rule = self._rules.get(piece.type) if isinstance(piece, PieceKind) else None
        if rule is None:
            raise InvariantViolation(f"no movement rule for {piece!r}")
        return rule

    def reaches(self, from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        piece = board.piece_at(from_sq)
        if piece is None:
            return False
        return self.rule_for(piece).reaches(from_sq, to_sq, board)
