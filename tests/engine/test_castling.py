from __future__ import annotations

import pytest

from chessrules.engine.errors import IllegalMoveError
from chessrules.engine.game import Game, commit_move
from chessrules.engine.layout import parse_layout
from chessrules.engine.move import MoveKind, MoveStatus
from chessrules.engine.pieces import PieceKind, Side
from chessrules.engine.square import Square
from chessrules.engine.validator import MoveValidator


OPEN = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"


def test_white_castling_available_when_clear_and_not_in_check(validator: MoveValidator) -> None:
    b = parse_layout(OPEN)
    # Castling is requested by moving the king onto its own rook
    assert validator.get_move_status("e1", "h1", b) is MoveStatus.VALID_MOVE
    assert validator.get_move_status("e1", "a1", b) is MoveStatus.VALID_MOVE
    assert validator.get_move_type("e1", "h1", b) is MoveKind.CASTLING
    assert validator.get_move_type("e1", "a1", b) is MoveKind.CASTLING
    moves = validator.get_all_legal_moves("e1", Side.WHITE, b)
    assert Square.A1 in moves and Square.H1 in moves


def test_black_castling_available(validator: MoveValidator) -> None:
    b = parse_layout("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    assert validator.get_move_status("e8", "h8", b) is MoveStatus.VALID_MOVE
    assert validator.get_move_status("e8", "a8", b) is MoveStatus.VALID_MOVE


@pytest.mark.parametrize(
    "layout,to_sq",
    [
        # Knight between king and rook
        ("r3k2r/8/8/8/8/8/8/R3K1NR w KQkq - 0 1", "h1"),
        # King in check from e8 rook
        ("4r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1", "h1"),
        ("4r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1", "a1"),
        # Rook on f8 covers the square the king passes through
        ("r3kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1", "h1"),
        # Rook on g8 covers the landing square
        ("r3k1r1/8/8/8/8/8/8/R3K2R w KQ - 0 1", "h1"),
        # Right already lost
        ("r3k2r/8/8/8/8/8/8/R3K2R w Q - 0 1", "h1"),
    ],
)
def test_castling_refused(validator: MoveValidator, layout: str, to_sq: str) -> None:
    b = parse_layout(layout)
    assert not validator.get_move_status("e1", to_sq, b).is_valid
    assert validator.get_move_type("e1", to_sq, b) is MoveKind.MOVE_NOT_ALLOWED


def test_other_wing_unaffected_by_attacked_pass_through(validator: MoveValidator) -> None:
    b = parse_layout("r3kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert validator.get_move_status("e1", "a1", b) is MoveStatus.VALID_MOVE


def test_castling_moves_rook_correctly() -> None:
    game = Game.from_layout(OPEN)
    record = game.apply_move("e1", "h1")
    b = game.board
    assert record.kind is MoveKind.CASTLING
    assert b.piece_at(Square.G1) is PieceKind.W_KING
    assert b.piece_at(Square.F1) is PieceKind.W_ROOK
    assert b.piece_at(Square.E1) is None and b.piece_at(Square.H1) is None
    assert b.castling == "kq"
    assert b.active_side is Side.BLACK

    game.apply_move("e8", "a8")
    assert b.piece_at(Square.C8) is PieceKind.B_KING
    assert b.piece_at(Square.D8) is PieceKind.B_ROOK
    assert b.castling == ""
    assert game.to_layout().split()[0] == "2kr3r/8/8/8/8/8/8/R4RK1"


def test_returning_rook_does_not_restore_rights() -> None:
    game = Game.from_layout(OPEN)
    for from_sq, to_sq in [("h1", "h2"), ("a8", "a7"), ("h2", "h1"), ("a7", "a8")]:
        game.apply_move(from_sq, to_sq)
    assert game.board.castling == "Qk"
    assert not game.move_status("e1", "h1").is_valid
    assert game.move_status("e1", "a1") is MoveStatus.VALID_MOVE


@pytest.mark.parametrize(
    "layout",
    [
        # Knight stands on the king's landing square, outside the king-rook span
        "4k3/8/8/8/8/8/8/1K2R1N1 w K - 0 1",
        # Rook on d8 covers d1, which the king crosses on its way to g1
        "3rk3/8/8/8/8/8/8/1K2R3 w K - 0 1",
    ],
)
def test_castling_from_off_file_king_refused(validator: MoveValidator, layout: str) -> None:
    b = parse_layout(layout)
    assert not validator.get_move_status("b1", "e1", b).is_valid
    assert validator.get_move_type("b1", "e1", b) is MoveKind.MOVE_NOT_ALLOWED
    assert Square.E1 not in validator.get_all_legal_moves("b1", Side.WHITE, b)


def test_occupied_landing_survives_rejected_castling() -> None:
    game = Game.from_layout("4k3/8/8/8/8/8/8/1K2R1N1 w K - 0 1")
    with pytest.raises(IllegalMoveError):
        game.apply_move("b1", "e1")
    assert game.board.piece_at(Square.G1) is PieceKind.W_KNIGHT
    assert game.board.piece_at(Square.B1) is PieceKind.W_KING


def test_commit_refuses_castling_onto_occupied_landing() -> None:
    b = parse_layout("4k3/8/8/8/8/8/8/1K2R1N1 w K - 0 1")
    with pytest.raises(IllegalMoveError):
        commit_move(b, Square.B1, Square.E1, MoveKind.CASTLING)
    assert b.piece_at(Square.G1) is PieceKind.W_KNIGHT


def test_castling_from_off_file_king_lands_on_fixed_squares() -> None:
    game = Game.from_layout("4k3/8/8/8/8/8/8/1K2R3 w K - 0 1")
    assert game.move_status("b1", "e1") is MoveStatus.VALID_MOVE
    record = game.apply_move("b1", "e1")
    assert record.kind is MoveKind.CASTLING
    b = game.board
    assert b.piece_at(Square.G1) is PieceKind.W_KING
    assert b.piece_at(Square.F1) is PieceKind.W_ROOK
    assert b.piece_at(Square.B1) is None and b.piece_at(Square.E1) is None
