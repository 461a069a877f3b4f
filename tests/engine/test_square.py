from __future__ import annotations

import pytest

from chessrules.engine.pieces import PieceKind, PieceType, Side
from chessrules.engine.square import LIGHT_SQUARES, Square


def test_parse_and_coordinates() -> None:
    sq = Square.parse("e4")
    assert sq is Square.E4
    assert (sq.file, sq.rank) == (4, 3)
    assert str(sq) == "e4"
    assert Square.parse("E4") is Square.E4
    assert Square.at(7, 7) is Square.H8
    assert Square.at(8, 0) is None


@pytest.mark.parametrize("name", ["", "e", "i1", "a9", "a0", "e44"])
def test_parse_rejects_bad_names(name: str) -> None:
    with pytest.raises(ValueError):
        Square.parse(name)


def test_coerce_never_raises() -> None:
    assert Square.coerce("h1") is Square.H1
    assert Square.coerce(Square.A1) is Square.A1
    assert Square.coerce("zz") is None
    assert Square.coerce(5) is None
    assert Square.coerce(None) is None


def test_between_and_alignment() -> None:
    assert Square.A1.between(Square.D4) == [Square.B2, Square.C3]
    assert Square.E1.between(Square.E4) == [Square.E2, Square.E3]
    assert Square.H1.between(Square.E1) == [Square.G1, Square.F1]
    assert Square.A1.between(Square.B3) == []
    assert Square.A1.between(Square.A2) == []
    assert Square.A1.is_diagonal_to(Square.H8)
    assert Square.A1.is_orthogonal_to(Square.A8)
    assert not Square.A1.is_orthogonal_to(Square.A1)
    assert Square.B1.distance(Square.G7) == 6


def test_light_square_partition() -> None:
    assert len(LIGHT_SQUARES) == 32
    assert not Square.A1.is_light
    assert Square.H1.is_light
    assert Square.C4.is_light and Square.F5.is_light
    assert not Square.E5.is_light


def test_piece_kinds() -> None:
    assert PieceKind.from_char("Q") is PieceKind.W_QUEEN
    assert PieceKind.of(Side.BLACK, PieceType.KNIGHT) is PieceKind.B_KNIGHT
    assert PieceKind.B_ROOK.side is Side.BLACK
    assert PieceKind.B_ROOK.type is PieceType.ROOK
    assert PieceKind.W_QUEEN.points == 9
    assert Side.WHITE.other is Side.BLACK
    with pytest.raises(ValueError):
        PieceKind.from_char("x")
