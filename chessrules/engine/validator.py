from __future__ import annotations

from typing import Dict, List, Optional

from .board import BoardState
from .check import CheckAnalyzer, KingStatus
from .move import MoveKind, MoveStatus
from .pieces import Side
from .rules import Rulebook, castling_landings
from .square import Square


class MoveValidator:
    """Final legality verdicts: piece shape plus the king-safety filter.

    Responsibility: look up the mover's rule, resolve castling to the king's
    landing square, and reject anything that leaves the mover's own king
    attacked. Every query is a pure function of the board it is given; bad
    input yields an invalid verdict or an empty list rather than an error.
    """

    def __init__(self, analyzer: Optional[CheckAnalyzer] = None) -> None:
        geometry = Rulebook()
        self.analyzer = analyzer if analyzer is not None else CheckAnalyzer(geometry)
        self.rules = geometry.with_analyzer(self.analyzer)

    def get_move_status(self, from_sq, to_sq, board: Optional[BoardState]) -> MoveStatus:
        """Return the legality verdict for moving ``from_sq`` -> ``to_sq``.

        Args:
            from_sq: Origin as a :class:`Square` or square name.
            to_sq: Destination as a :class:`Square` or square name. Castling is
                requested by targeting the castling rook's square.
            board (Optional[BoardState]): Snapshot to evaluate against.

        Returns:
            MoveStatus: ``VALID_MOVE``/``VALID_ATTACK`` only if the move is fully
                legal; ``KING_ATTACK_KING`` and ``CAN_PROTECT_FRIENDLY`` are
                passed through from the piece rule.
        """
        origin = Square.coerce(from_sq)
        target = Square.coerce(to_sq)
        if board is None or origin is None or target is None:
            return MoveStatus.INVALID_MOVE
        piece = board.piece_at(origin)
        if piece is None:
            return MoveStatus.INVALID_MOVE

        rule = self.rules.rule_for(piece)
        status = rule.status(origin, target, board)

        if status.is_attack:
            if status is MoveStatus.VALID_ATTACK and self._king_safe(origin, target, board):
                return MoveStatus.VALID_ATTACK
            return MoveStatus.INVALID_ATTACK
        if status.is_move:
            if rule.kind(origin, target, board) is MoveKind.CASTLING:
                target = castling_landings(piece.side, origin, target)[0]
            if status is MoveStatus.VALID_MOVE and self._king_safe(origin, target, board):
                return MoveStatus.VALID_MOVE
            return MoveStatus.INVALID_MOVE
        return status

    def get_move_type(self, from_sq, to_sq, board: Optional[BoardState]) -> MoveKind:
        """Classify the move without applying the king-safety filter."""
        origin = Square.coerce(from_sq)
        target = Square.coerce(to_sq)
        if board is None or origin is None or target is None:
            return MoveKind.MOVE_NOT_ALLOWED
        piece = board.piece_at(origin)
        if piece is None:
            return MoveKind.MOVE_NOT_ALLOWED
        return self.rules.rule_for(piece).kind(origin, target, board)

    def get_all_legal_moves(self, from_sq, side: Side, board: Optional[BoardState]) -> List[Square]:
        """Legal destinations for the ``side`` piece on ``from_sq``, in square order.

        Empty when the square is empty, invalid, or holds a piece of the other
        side.

        Raises:
            InvariantViolation: If the board holds an unrecognized entry.
        """
        origin = Square.coerce(from_sq)
        if board is None or origin is None or not isinstance(side, Side):
            return []
        piece = board.piece_at(origin)
        if piece is None or piece.side is not side:
            return []
        return [
            to_sq
            for to_sq in Square
            if to_sq is not origin and self.get_move_status(origin, to_sq, board).is_valid
        ]

    def legal_moves(self, side: Side, board: BoardState) -> Dict[Square, List[Square]]:
        """Every owned square of ``side`` that has at least one legal move."""
        moves: Dict[Square, List[Square]] = {}
        for sq, _ in board.pieces(side):
            targets = self.get_all_legal_moves(sq, side, board)
            if targets:
                moves[sq] = targets
        return moves

    def has_any_legal_move(self, side: Side, board: BoardState) -> bool:
        for sq, _ in board.pieces(side):
            for to_sq in Square:
                if to_sq is not sq and self.get_move_status(sq, to_sq, board).is_valid:
                    return True
        return False

    def king_status(self, side: Side, board: BoardState) -> KingStatus:
        return self.analyzer.king_status(side, board, self)

    def _king_safe(self, from_sq: Square, to_sq: Square, board: BoardState) -> bool:
        mover = board.piece_at(from_sq)
        if mover is None:
            return False
        return not self.analyzer.would_expose_king(from_sq, to_sq, mover.side, board)
