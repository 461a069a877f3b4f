from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from .board import BoardState
from .check import KingStatus
from .pieces import PieceType, Side
from .square import LIGHT_SQUARES
from .validator import MoveValidator


logger = logging.getLogger(__name__)


# History must be longer than this before the repetition window is inspected.
REPETITION_WINDOW = 11
REPETITION_OFFSET = 4


class Outcome(Enum):
    ONGOING = "ongoing"
    WHITE_CHECKMATED = "white_checkmated"
    BLACK_CHECKMATED = "black_checkmated"
    STALEMATE = "stalemate"
    REPETITION_DRAW = "repetition_draw"
    MATERIAL_DRAW = "material_draw"

    @property
    def cause(self) -> str:
        return _CAUSES[self]

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.ONGOING

    @property
    def is_draw(self) -> bool:
        return self in (Outcome.STALEMATE, Outcome.REPETITION_DRAW, Outcome.MATERIAL_DRAW)

    @classmethod
    def checkmated(cls, side: Side) -> "Outcome":
        return cls.WHITE_CHECKMATED if side is Side.WHITE else cls.BLACK_CHECKMATED


_CAUSES = {
    Outcome.ONGOING: "game in progress",
    Outcome.WHITE_CHECKMATED: "white is checkmated",
    Outcome.BLACK_CHECKMATED: "black is checkmated",
    Outcome.STALEMATE: "neither side has a legal move",
    Outcome.REPETITION_DRAW: "draw by move repetition",
    Outcome.MATERIAL_DRAW: "draw by insufficient material",
}


class GameOutcomeEvaluator:
    """Classify a board as ongoing or as one of the terminal outcomes.

    Checks run in a fixed priority order and the first match wins:
    checkmate, move repetition, mutual stalemate, insufficient material.
    """

    def __init__(self, validator: Optional[MoveValidator] = None) -> None:
        self.validator = validator if validator is not None else MoveValidator()

    def evaluate(self, board: BoardState) -> Outcome:
        outcome = self._classify(board)
        if outcome.is_terminal:
            logger.info("game over after %d moves: %s", board.total_moves, outcome.cause)
        return outcome

    def _classify(self, board: BoardState) -> Outcome:
        for side in Side:
            if board.king_square(side) is None:
                continue
            if self.validator.king_status(side, board) is KingStatus.CHECKMATE:
                return Outcome.checkmated(side)
        if is_repetition(board):
            return Outcome.REPETITION_DRAW
        if not any(self.validator.has_any_legal_move(side, board) for side in Side):
            return Outcome.STALEMATE
        if is_insufficient_material(board):
            return Outcome.MATERIAL_DRAW
        return Outcome.ONGOING


def is_repetition(board: BoardState) -> bool:
    """Fixed-window heuristic over the move history, not a position check.

    Takes the ten moves ending one before the latest and requires every move
    in the first half of that window to equal the move four plies later.
    """
    history = board.history
    if len(history) <= REPETITION_WINDOW:
        return False
    window = history[len(history) - REPETITION_WINDOW : len(history) - 1]
    half = len(window) // 2
    return all(window[i] == window[i + REPETITION_OFFSET] for i in range(half))


def is_insufficient_material(board: BoardState) -> bool:
    white = _non_king_pieces(board, Side.WHITE)
    black = _non_king_pieces(board, Side.BLACK)

    if not white and not black:
        return True
    if not white or not black:
        lone_minor = white or black
        return len(lone_minor) == 1 and lone_minor[0][1].type in (
            PieceType.KNIGHT,
            PieceType.BISHOP,
        )
    if len(white) == 1 and len(black) == 1:
        (w_sq, w_piece), (b_sq, b_piece) = white[0], black[0]
        if w_piece.is_type(PieceType.BISHOP) and b_piece.is_type(PieceType.BISHOP):
            return (w_sq in LIGHT_SQUARES) == (b_sq in LIGHT_SQUARES)
    return False


def _non_king_pieces(board: BoardState, side: Side) -> List:
    return [
        (sq, piece)
        for sq, piece in board.pieces(side)
        if not piece.is_type(PieceType.KING)
    ]
