from __future__ import annotations

from typing import List, Optional

from . import attacks
from .board import BISHOP, KING, KNIGHT, PAWN, QUEEN, ROOK, FORWARD, PAWN_ROW, Board, Piece, opponent
from .move import MoveRecord, Square, in_bounds


KNIGHT_OFFSETS = ((1, 2), (1, -2), (-1, 2), (-1, -2), (2, 1), (2, -1), (-2, 1), (-2, -1))
KING_OFFSETS = ((0, 1), (0, -1), (1, 0), (-1, 0), (1, 1), (1, -1), (-1, 1), (-1, -1))
ROOK_DIRS = ((0, 1), (0, -1), (1, 0), (-1, 0))
BISHOP_DIRS = ((1, 1), (1, -1), (-1, 1), (-1, -1))

SLIDER_DIRS = {
    ROOK: ROOK_DIRS,
    BISHOP: BISHOP_DIRS,
    QUEEN: ROOK_DIRS + BISHOP_DIRS,
}


def pseudo_legal_moves(
    board: Board,
    sq: Square,
    last_move: Optional[MoveRecord] = None,
    castling: bool = True,
) -> List[Square]:
    """Return destinations reachable by the piece on ``sq``.

    Args:
        board (Board): Position to generate on.
        sq (Square): Origin square; an empty square yields no moves.
        last_move (Optional[MoveRecord]): Previous move, consulted for en
            passant only.
        castling (bool): Include castling destinations for an unmoved king.
            Attack queries pass False.

    Returns:
        List[Square]: Destinations in generation order.

    Notes:
        Moves are not checked for leaving the own king in check. Knight and
        king destinations are bounded but not occupancy-filtered; the
        legality filter drops own-occupied targets.
    """
    piece = board.piece_at(sq)
    if piece is None:
        return []
    row, col = sq
    moves: List[Square] = []

    if piece.kind in SLIDER_DIRS:
        for dr, dc in SLIDER_DIRS[piece.kind]:
            r, c = row + dr, col + dc
            while in_bounds(r, c):
                target = board.grid[r][c]
                if target is not None:
                    if target.color != piece.color:
                        moves.append((r, c))
                    break
                moves.append((r, c))
                r += dr
                c += dc
    elif piece.kind == KNIGHT:
        for dr, dc in KNIGHT_OFFSETS:
            if in_bounds(row + dr, col + dc):
                moves.append((row + dr, col + dc))
    elif piece.kind == PAWN:
        moves.extend(_pawn_moves(board, sq, piece, last_move))
    elif piece.kind == KING:
        for dr, dc in KING_OFFSETS:
            if in_bounds(row + dr, col + dc):
                moves.append((row + dr, col + dc))
        if castling:
            moves.extend(_castling_moves(board, sq, piece))
    return moves


def _pawn_moves(
    board: Board, sq: Square, piece: Piece, last_move: Optional[MoveRecord]
) -> List[Square]:
    row, col = sq
    step = FORWARD[piece.color]
    ahead = row + step
    moves: List[Square] = []
    if not (0 <= ahead < 8):
        return moves

    if board.grid[ahead][col] is None:
        moves.append((ahead, col))
        two = row + 2 * step
        if row == PAWN_ROW[piece.color] and board.grid[two][col] is None:
            moves.append((two, col))

    for dc in (-1, 1):
        c = col + dc
        if not (0 <= c < 8):
            continue
        target = board.grid[ahead][c]
        if target is not None and target.color != piece.color:
            moves.append((ahead, c))
        elif target is None and _en_passant_ok(sq, c, step, last_move):
            moves.append((ahead, c))
    return moves


def _en_passant_ok(sq: Square, col: int, step: int, last_move: Optional[MoveRecord]) -> bool:
    if last_move is None or last_move.piece.kind != PAWN:
        return False
    (lfr, _), (ltr, ltc) = last_move.from_sq, last_move.to_sq
    if abs(ltr - lfr) != 2:
        return False
    # The skipped square must be the one this pawn lands on
    return ltr == sq[0] and ltc == col and sq[0] + step == (lfr + ltr) // 2


def _castling_moves(board: Board, sq: Square, king: Piece) -> List[Square]:
    row = sq[0]
    if king.has_moved or attacks.is_king_in_check(board, king.color):
        return []
    enemy = opponent(king.color)
    moves: List[Square] = []
    # (rook col, squares that must be empty, squares the king crosses or lands on, target col)
    for rook_col, between, transit, target in (
        (7, (5, 6), (5, 6), 6),
        (0, (1, 2, 3), (3, 2), 2),
    ):
        rook = board.grid[row][rook_col]
        if rook is None or rook.kind != ROOK or rook.color != king.color or rook.has_moved:
            continue
        if any(board.grid[row][c] is not None for c in between):
            continue
        if any(attacks.is_square_attacked(board, (row, c), enemy) for c in transit):
            continue
        moves.append((row, target))
    return moves
