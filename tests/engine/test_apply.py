from __future__ import annotations

import pytest

from chessrules.engine.board import BoardState
from chessrules.engine.errors import IllegalMoveError
from chessrules.engine.game import Game, commit_move, promote
from chessrules.engine.layout import STANDARD_LAYOUT
from chessrules.engine.move import MoveKind, parse_uci
from chessrules.engine.outcome import Outcome
from chessrules.engine.pieces import PieceType, Side
from chessrules.engine.square import Square


def test_apply_updates_layout_and_history() -> None:
    game = Game.new()
    record = game.apply_move("e2", "e4")
    assert record.side is Side.WHITE
    assert record.to_uci() == "e2e4"
    assert game.to_layout() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3"
    assert game.move_history_uci() == ["e2e4"]


def test_apply_accepts_parsed_moves() -> None:
    game = Game.from_layout(STANDARD_LAYOUT)
    mv = parse_uci("g1f3")
    record = game.apply_move(mv.from_sq, mv.to_sq)
    assert record.kind is MoveKind.NORMAL_MOVE


@pytest.mark.parametrize(
    "from_sq,to_sq",
    [
        ("e2", "e5"),  # not a pawn move
        ("e7", "e5"),  # not white's turn
        ("e4", "e5"),  # empty origin
        ("e2", "z9"),  # unknown square
        ("d1", "e1"),  # own piece on target
    ],
)
def test_apply_rejects_illegal_move(from_sq: str, to_sq: str) -> None:
    game = Game.new()
    with pytest.raises(IllegalMoveError):
        game.apply_move(from_sq, to_sq)
    assert game.board.total_moves == 0
    assert game.to_layout().startswith("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w")


def test_illegal_move_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        Game.new().apply_move("a1", "a5")


def test_no_moves_after_game_over() -> None:
    game = Game.from_layout("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    assert game.outcome() is Outcome.MATERIAL_DRAW
    assert game.board.drawn
    with pytest.raises(IllegalMoveError):
        game.apply_move("e1", "e2")


def test_legal_moves_empty_after_game_over() -> None:
    game = Game.from_layout("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    assert game.outcome().is_terminal
    assert game.validator.get_all_legal_moves("e1", Side.WHITE, game.board)
    assert game.legal_moves("e1") == []


def test_commit_on_empty_square_raises() -> None:
    b = BoardState.standard()
    with pytest.raises(IllegalMoveError):
        commit_move(b, Square.E4, Square.E5, MoveKind.NORMAL_MOVE)
    with pytest.raises(IllegalMoveError):
        promote(b, Square.E4, PieceType.QUEEN)
    assert b == BoardState.standard()


def test_parse_uci_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_uci("e2e")
    with pytest.raises(ValueError):
        parse_uci("e2x4")
