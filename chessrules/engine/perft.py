from __future__ import annotations

from typing import Dict, Optional

from .board import BoardState
from .game import commit_move, promote
from .move import MoveKind
from .pieces import PROMOTION_TYPES
from .validator import MoveValidator


def perft(board: BoardState, depth: int, validator: Optional[MoveValidator] = None) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are built by committing each legal move on a clone; a promotion
    counts once per upgrade choice. Terminal outcomes are not consulted.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    validator = validator if validator is not None else MoveValidator()
    return sum(perft(child, depth - 1, validator) for child in _children(board, validator))


def divide(board: BoardState, depth: int, validator: Optional[MoveValidator] = None) -> Dict[str, int]:
    """Per-root-move node counts, keyed by UCI text (promotions suffixed)."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    validator = validator if validator is not None else MoveValidator()
    counts: Dict[str, int] = {}
    for from_sq, targets in validator.legal_moves(board.active_side, board).items():
        for to_sq in targets:
            for suffix, child in _expand(board, from_sq, to_sq, validator):
                counts[f"{from_sq}{to_sq}{suffix}"] = perft(child, depth - 1, validator)
    return counts


def _children(board: BoardState, validator: MoveValidator):
    for from_sq, targets in validator.legal_moves(board.active_side, board).items():
        for to_sq in targets:
            for _, child in _expand(board, from_sq, to_sq, validator):
                yield child


def _expand(board: BoardState, from_sq, to_sq, validator: MoveValidator):
    kind = validator.get_move_type(from_sq, to_sq, board)
    if kind is not MoveKind.PAWN_PROMOTION:
        child = board.clone()
        commit_move(child, from_sq, to_sq, kind)
        yield "", child
        return
    for piece_type in PROMOTION_TYPES:
        child = board.clone()
        commit_move(child, from_sq, to_sq, kind)
        promote(child, to_sq, piece_type)
        yield piece_type.value, child
