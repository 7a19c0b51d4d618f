from __future__ import annotations

from typing import List, Optional

from .attacks import is_king_in_check
from .board import KING, Board
from .move import Move, MoveRecord, Square
from .movegen import pseudo_legal_moves


def simulate_move(board: Board, from_sq: Square, to_sq: Square) -> Board:
    """Return a copy of ``board`` with the piece relocated.

    Only the moving piece (and its king position) changes: en passant
    victims stay on the board and castling rooks stay home. Shared by the
    legality filter and the search.
    """
    scratch = board.copy()
    piece = scratch.grid[from_sq[0]][from_sq[1]]
    if piece is not None and piece.kind == KING:
        scratch.king_positions[piece.color] = to_sq
    scratch.grid[to_sq[0]][to_sq[1]] = piece
    scratch.grid[from_sq[0]][from_sq[1]] = None
    return scratch


def _keeps_king_safe(board: Board, from_sq: Square, to_sq: Square) -> bool:
    piece = board.piece_at(from_sq)
    if piece is None:
        return False
    target = board.piece_at(to_sq)
    if target is not None and target.color == piece.color:
        return False
    scratch = simulate_move(board, from_sq, to_sq)
    return not is_king_in_check(scratch, piece.color)


def is_legal(
    board: Board, from_sq: Square, to_sq: Square, last_move: Optional[MoveRecord] = None
) -> bool:
    """Return True if moving ``from_sq`` to ``to_sq`` is legal on ``board``.

    Known gap: the simulation does not remove a pawn captured en passant, so
    a pin revealed only by that removal goes undetected.
    """
    if not _keeps_king_safe(board, from_sq, to_sq):
        return False
    return to_sq in pseudo_legal_moves(board, from_sq, last_move)


def valid_moves_for_piece(
    board: Board, sq: Square, last_move: Optional[MoveRecord] = None
) -> List[Square]:
    return [
        to_sq
        for to_sq in pseudo_legal_moves(board, sq, last_move)
        if _keeps_king_safe(board, sq, to_sq)
    ]


def all_legal_moves(
    board: Board, color: str, last_move: Optional[MoveRecord] = None
) -> List[Move]:
    """Enumerate every legal move for ``color`` in row-major origin order."""
    moves: List[Move] = []
    for sq, _piece in board.pieces(color):
        for to_sq in valid_moves_for_piece(board, sq, last_move):
            moves.append(Move(sq, to_sq))
    return moves


def has_legal_moves(board: Board, color: str, last_move: Optional[MoveRecord] = None) -> bool:
    for sq, _piece in board.pieces(color):
        if valid_moves_for_piece(board, sq, last_move):
            return True
    return False
