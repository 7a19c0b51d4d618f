from __future__ import annotations

from . import movegen
from .board import Board, opponent
from .move import Square


def is_square_attacked(board: Board, sq: Square, by_color: str) -> bool:
    """Return True if ``sq`` is a pseudo-legal destination of a ``by_color`` piece.

    Pawns therefore attack a diagonal only when an enemy stands on it, and
    their push squares count as attacked. Attackers are generated without
    castling, which keeps castling safety checks from recursing.
    """
    for origin, _piece in board.pieces(by_color):
        if sq in movegen.pseudo_legal_moves(board, origin, castling=False):
            return True
    return False


def is_king_in_check(board: Board, color: str) -> bool:
    king_sq = board.king_positions.get(color)
    if king_sq is None:
        return False
    return is_square_attacked(board, king_sq, opponent(color))
