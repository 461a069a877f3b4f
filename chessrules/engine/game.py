from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .board import ROOK_CORNERS, BoardState
from .check import KingStatus
from .errors import IllegalMoveError
from .layout import STANDARD_LAYOUT, format_layout, parse_layout
from .move import MoveKind, MoveRecord, MoveStatus
from .outcome import GameOutcomeEvaluator, Outcome
from .pieces import PROMOTION_TYPES, PieceKind, PieceType, Side
from .rules import castling_landings
from .square import Square
from .validator import MoveValidator


logger = logging.getLogger(__name__)


def commit_move(board: BoardState, from_sq: Square, to_sq: Square, kind: MoveKind) -> MoveRecord:
    """Apply an already-validated move to ``board`` in place.

    Castling is requested by targeting the rook; the king and rook go to their
    fixed landing squares. The record keeps the requested destination.

    Raises:
        IllegalMoveError: If ``from_sq`` is empty or a castling landing square
            is held by a third piece.
    """
    mover = board.piece_at(from_sq)
    if mover is None:
        raise IllegalMoveError(f"no piece on {from_sq}")
    side = mover.side
    board.pawn_double_stepped.clear()

    captured: Optional[PieceKind] = None
    if kind is MoveKind.CASTLING:
        king_to, rook_to = castling_landings(side, from_sq, to_sq)
        for landing in (king_to, rook_to):
            if landing not in (from_sq, to_sq) and not board.is_empty(landing):
                raise IllegalMoveError(f"castling landing {landing} is occupied")
        king = board.placement.pop(from_sq)
        rook = board.placement.pop(to_sq)
        board.placement[king_to] = king
        board.placement[rook_to] = rook
        _mark_moved(board, from_sq, king_to)
        _mark_moved(board, to_sq, rook_to)
    else:
        if kind is MoveKind.EN_PASSANT:
            passed = Square.at(to_sq.file, from_sq.rank)
            captured = board.placement.pop(passed, None)
            board.moved.discard(passed)
            board.piece_turns.pop(passed, None)
        captured_here = board.relocate(from_sq, to_sq)
        captured = captured or captured_here
        _mark_moved(board, from_sq, to_sq)
        if kind is MoveKind.PAWN_HOP:
            board.pawn_double_stepped.add(to_sq)

    if captured is not None:
        board.score[side] += captured.points
    _update_castling_rights(board, mover, from_sq, to_sq, captured)

    record = MoveRecord(side, from_sq, to_sq, kind)
    board.turn_counters[side] += 1
    board.total_moves += 1
    board.history.append(record)

    if kind is MoveKind.PAWN_PROMOTION:
        board.paused = True
        board.pending_promotion = to_sq
    else:
        board.active_side = side.other
    return record


def promote(board: BoardState, square: Square, piece_type: PieceType) -> None:
    """Replace the pending pawn on ``square`` and hand the move to the opponent."""
    pawn = board.piece_at(square)
    if pawn is None:
        raise IllegalMoveError(f"no piece to promote on {square}")
    board.placement[square] = PieceKind.of(pawn.side, piece_type)
    board.paused = False
    board.pending_promotion = None
    board.active_side = pawn.side.other


def _mark_moved(board: BoardState, from_sq: Square, to_sq: Square) -> None:
    board.moved.discard(from_sq)
    board.moved.add(to_sq)
    board.piece_turns.pop(from_sq, None)
    board.piece_turns[to_sq] = board.total_moves


def _update_castling_rights(
    board: BoardState,
    mover: PieceKind,
    from_sq: Square,
    to_sq: Square,
    captured: Optional[PieceKind],
) -> None:
    if mover.is_type(PieceType.KING):
        board.revoke_castling(mover.side)
    if from_sq in ROOK_CORNERS and mover.is_type(PieceType.ROOK):
        side, wing = ROOK_CORNERS[from_sq]
        if side is mover.side:
            board.revoke_castling(side, wing)
    if to_sq in ROOK_CORNERS and captured is not None and captured.is_type(PieceType.ROOK):
        side, wing = ROOK_CORNERS[to_sq]
        if side is captured.side:
            board.revoke_castling(side, wing)


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: own the live board, reject illegal commits, and keep the
    outcome current after every committed move or promotion.
    """

    board: BoardState
    validator: MoveValidator = field(default_factory=MoveValidator, repr=False)
    evaluator: GameOutcomeEvaluator = field(init=False, repr=False)
    last_outcome: Outcome = field(init=False, default=Outcome.ONGOING)

    def __post_init__(self) -> None:
        self.board.validate()
        self.evaluator = GameOutcomeEvaluator(self.validator)
        self._refresh_outcome()

    @classmethod
    def new(cls) -> "Game":
        return cls(board=BoardState.standard())

    @classmethod
    def from_layout(cls, layout: Optional[str] = None) -> "Game":
        return cls(board=parse_layout(layout or STANDARD_LAYOUT))

    def to_layout(self) -> str:
        return format_layout(self.board)

    # --- Queries ---

    def legal_moves(self, square) -> List[Square]:
        """Legal destinations for the piece on ``square`` if it is its side's turn.

        Empty while a promotion is pending and once the game is over.
        """
        if self.board.paused or self.board.drawn or self.last_outcome.is_terminal:
            return []
        return self.validator.get_all_legal_moves(square, self.board.active_side, self.board)

    def move_status(self, from_sq, to_sq) -> MoveStatus:
        return self.validator.get_move_status(from_sq, to_sq, self.board)

    def move_type(self, from_sq, to_sq) -> MoveKind:
        return self.validator.get_move_type(from_sq, to_sq, self.board)

    def king_status(self, side: Side) -> KingStatus:
        return self.validator.king_status(side, self.board)

    def outcome(self) -> Outcome:
        return self.last_outcome

    def move_history_uci(self) -> List[str]:
        return [record.to_uci() for record in self.board.history]

    # --- Commits ---

    def apply_move(self, from_sq, to_sq) -> MoveRecord:
        """Commit a legal move for the side to move.

        Raises:
            IllegalMoveError: If the game is paused or over, a square is
                invalid, the origin is not the active side's piece, or the
                move is not legal.
        """
        origin = Square.coerce(from_sq)
        target = Square.coerce(to_sq)
        if origin is None or target is None:
            raise IllegalMoveError(f"unknown square in move {from_sq!r} -> {to_sq!r}")
        if self.board.paused:
            raise IllegalMoveError(f"promotion pending on {self.board.pending_promotion}")
        if self.board.drawn or self.last_outcome.is_terminal:
            raise IllegalMoveError(f"game is over: {self.last_outcome.cause}")
        piece = self.board.piece_at(origin)
        if piece is None or piece.side is not self.board.active_side:
            raise IllegalMoveError(f"no {self.board.active_side} piece on {origin}")

        status = self.validator.get_move_status(origin, target, self.board)
        if not status.is_valid:
            raise IllegalMoveError(f"illegal move {origin}{target}: {status.value}")
        kind = self.validator.get_move_type(origin, target, self.board)

        record = commit_move(self.board, origin, target, kind)
        logger.info("%s played %s (%s)", record.side, record.to_uci(), kind.value)
        self._refresh_outcome()
        return record

    def upgrade_piece(
        self,
        square,
        piece_type: Union[PieceType, str],
        side: Union[Side, str],
    ) -> bool:
        """Finish a pending promotion. Returns False if the request is rejected."""
        sq = Square.coerce(square)
        new_type = _coerce_piece_type(piece_type)
        owner = _coerce_side(side)
        pawn = self.board.piece_at(sq)
        if (
            sq is None
            or owner is None
            or new_type not in PROMOTION_TYPES
            or sq is not self.board.pending_promotion
            or pawn is not PieceKind.of(owner, PieceType.PAWN)
            or sq.rank != owner.other.home_rank
        ):
            logger.warning(
                "rejected promotion on %s to %r for %r", square, piece_type, side
            )
            return False
        promote(self.board, sq, new_type)
        logger.info("%s pawn on %s promoted to %s", owner, sq, new_type.name.lower())
        self._refresh_outcome()
        return True

    def _refresh_outcome(self) -> None:
        self.last_outcome = self.evaluator.evaluate(self.board)
        if self.last_outcome.is_draw:
            self.board.drawn = True


def _coerce_piece_type(value) -> Optional[PieceType]:
    if isinstance(value, PieceType):
        return value
    if isinstance(value, str):
        try:
            return PieceType(value.lower())
        except ValueError:
            return None
    return None


def _coerce_side(value) -> Optional[Side]:
    if isinstance(value, Side):
        return value
    if isinstance(value, str):
        try:
            return Side(value.lower()[:1])
        except ValueError:
            return None
    return None
