from __future__ import annotations

import pytest

from chessrules.engine.game import Game
from chessrules.engine.layout import parse_layout
from chessrules.engine.outcome import GameOutcomeEvaluator, Outcome
from chessrules.engine.validator import MoveValidator


@pytest.fixture(scope="module")
def evaluator() -> GameOutcomeEvaluator:
    return GameOutcomeEvaluator(MoveValidator())


def test_start_position_is_ongoing(evaluator: GameOutcomeEvaluator) -> None:
    assert evaluator.evaluate(parse_layout("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR")) is Outcome.ONGOING


def test_checkmate(evaluator: GameOutcomeEvaluator) -> None:
    b = parse_layout("7k/6Q1/6K1/8/8/8/8/8 b - - 0 1")
    outcome = evaluator.evaluate(b)
    assert outcome is Outcome.BLACK_CHECKMATED
    assert outcome.is_terminal and not outcome.is_draw


def test_one_sided_stalemate_is_not_an_outcome(evaluator: GameOutcomeEvaluator) -> None:
    # Black has no move but white does; only a mutual block ends the game
    b = parse_layout("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert evaluator.evaluate(b) is Outcome.ONGOING


def test_mutual_stalemate(evaluator: GameOutcomeEvaluator) -> None:
    b = parse_layout("6bk/5p1p/5P1P/8/8/p1p5/P1P5/KB6 w - - 0 1")
    outcome = evaluator.evaluate(b)
    assert outcome is Outcome.STALEMATE
    assert outcome.is_draw


@pytest.mark.parametrize(
    "layout,expected",
    [
        # Lone kings
        ("4k3/8/8/8/8/8/8/4K3 w - - 0 1", Outcome.MATERIAL_DRAW),
        # King and knight against king
        ("4k3/8/8/8/8/8/8/4KN2 w - - 0 1", Outcome.MATERIAL_DRAW),
        # King and bishop against king
        ("4k3/8/8/8/8/8/8/2b1K3 w - - 0 1", Outcome.MATERIAL_DRAW),
        # Bishops on same-coloured squares (c4 and f5 are both light)
        ("4k3/8/8/5b2/2B5/8/8/4K3 w - - 0 1", Outcome.MATERIAL_DRAW),
        # Bishops on opposite colours
        ("4k3/8/8/4b3/2B5/8/8/4K3 w - - 0 1", Outcome.ONGOING),
        # A rook is enough to play on
        ("4k3/8/8/8/8/8/8/4KR2 w - - 0 1", Outcome.ONGOING),
        # Knight against knight is not covered by the rule
        ("4k1n1/8/8/8/8/8/8/4KN2 w - - 0 1", Outcome.ONGOING),
        # Two minors against a lone king
        ("4k3/8/8/8/8/8/8/3BKN2 w - - 0 1", Outcome.ONGOING),
        # A single pawn
        ("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1", Outcome.ONGOING),
    ],
)
def test_material_draws(evaluator: GameOutcomeEvaluator, layout: str, expected: Outcome) -> None:
    assert evaluator.evaluate(parse_layout(layout)) is expected


def test_back_rank_mate() -> None:
    # Own pawns block every escape square
    b = parse_layout("R5k1/5ppp/8/8/8/8/8/6K1 b - - 0 1")
    assert GameOutcomeEvaluator().evaluate(b) is Outcome.BLACK_CHECKMATED


def test_repetition_draw_after_shuffling_knights() -> None:
    game = Game.new()
    cycle = [("g1", "f3"), ("g8", "f6"), ("f3", "g1"), ("f6", "g8")]
    moves = cycle * 3
    for from_sq, to_sq in moves[:11]:
        game.apply_move(from_sq, to_sq)
    assert game.outcome() is Outcome.ONGOING

    game.apply_move(*moves[11])
    assert game.outcome() is Outcome.REPETITION_DRAW
    assert game.board.drawn


def test_scholars_mate() -> None:
    game = Game.new()
    for from_sq, to_sq in [("e2", "e4"), ("e7", "e5"), ("d1", "h5")]:
        game.apply_move(from_sq, to_sq)
    assert game.outcome() is Outcome.ONGOING
    for from_sq, to_sq in [("b8", "c6"), ("f1", "c4"), ("g8", "f6"), ("h5", "f7")]:
        game.apply_move(from_sq, to_sq)
    assert game.outcome() is Outcome.BLACK_CHECKMATED
    assert not game.board.drawn


def test_fools_mate() -> None:
    game = Game.new()
    for from_sq, to_sq in [("f2", "f3"), ("e7", "e5"), ("g2", "g4"), ("d8", "h4")]:
        game.apply_move(from_sq, to_sq)
    assert game.outcome() is Outcome.WHITE_CHECKMATED
