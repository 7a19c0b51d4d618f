from __future__ import annotations

from src.engine.board import QUEEN, Board
from src.eval import PIECE_VALUES, evaluate


def test_startpos_is_balanced() -> None:
    assert evaluate(Board.startpos()) == 0


def test_missing_white_queen_favours_black() -> None:
    board = Board.from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNB1KBNR")
    assert evaluate(board) == PIECE_VALUES[QUEEN]


def test_extra_white_material_is_negative() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/PPPP4/RN2K3 w - - 0 1")
    assert evaluate(board) == -(4 * 1 + 5 + 3)


def test_evaluate_is_pure() -> None:
    board = Board.startpos()
    evaluate(board)
    assert board == Board.startpos()
