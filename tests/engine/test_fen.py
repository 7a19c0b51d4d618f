from __future__ import annotations

import pytest

from src.engine.board import BLACK, KING, PAWN, ROOK, WHITE, Board, STARTPOS_FEN
from src.engine.game import Game
from src.engine.move import str_to_square


def test_startpos_round_trip() -> None:
    assert Game.from_fen(STARTPOS_FEN).to_fen() == STARTPOS_FEN
    assert Game.new().to_fen() == STARTPOS_FEN


def test_fen_after_double_step_reports_ep_target(play) -> None:
    game = play(Game.new(ai_enabled=False), "e2e4")
    assert game.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"


@pytest.mark.parametrize(
    "fen",
    [
        "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1",
        "r3k2r/8/8/8/8/8/8/R3K2R b Kq - 0 1",
        "4k3/8/8/8/8/8/8/4K3 w - - 0 1",
    ],
)
def test_castling_field_round_trip(fen: str) -> None:
    assert Game.from_fen(fen).to_fen() == fen


def test_placement_only_infers_unmoved_home_pieces() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/P7/R3K2R")
    assert b.castling_rights() == "KQkq"
    assert b.piece_at(str_to_square("a2")).has_moved is False
    assert b.king_positions == {BLACK: (0, 4), WHITE: (7, 4)}


def test_castling_field_marks_rooks_and_king() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w Q - 0 1")
    assert b.piece_at(str_to_square("h1")).has_moved is True
    assert b.piece_at(str_to_square("a1")).has_moved is False
    assert b.piece_at(str_to_square("e1")).has_moved is False
    # Black kept no rights, so its king counts as moved
    king = b.piece_at(str_to_square("e8"))
    assert king.kind == KING and king.has_moved is True


def test_pieces_off_home_squares_are_moved() -> None:
    b = Board.from_fen("4k3/8/8/8/3P4/8/8/R3K3 w - - 0 1")
    assert b.piece_at(str_to_square("d4")).kind == PAWN
    assert b.piece_at(str_to_square("d4")).has_moved is True
    assert b.piece_at(str_to_square("a1")).kind == ROOK


def test_side_to_move_from_fen() -> None:
    assert Game.from_fen("4k3/8/8/8/8/8/8/4K3 b - - 0 1").current_player == BLACK


@pytest.mark.parametrize(
    "fen",
    [
        "",  # empty
        "8/8/8/8/8/8/8 w - - 0 1",  # not enough ranks
        "4k3/8/8/8/8/8/8/4K3 w - - 0",  # missing fields
        "4k3/8/8/8/8/8/8/4K3 x - - 0 1",  # bad side to move
        "4k3/8/8/8/8/8/8/4K3 w A - 0 1",  # bad castling
        "9/8/8/8/8/8/8/8 w - - 0 1",  # too many squares
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w KQkq - 0 1",  # bad piece
        "8/8/8/8/8/8/8/4K3 w - - 0 1",  # no black king
        "4k3/8/8/8/8/8/8/3KK3 w - - 0 1",  # two white kings
    ],
)
def test_invalid_fen_raises(fen: str) -> None:
    with pytest.raises(ValueError):
        Game.from_fen(fen)
