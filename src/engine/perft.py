from __future__ import annotations

from typing import Dict, Optional

from .board import Board, opponent
from .legality import all_legal_moves
from .move import MoveRecord


def perft(board: Board, color: str, depth: int, last_move: Optional[MoveRecord] = None) -> int:
    """Compute perft node count for ``color`` to move on ``board`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are made with the full move executor on board copies, so
    castling, en passant and promotion are all applied. Promotion always
    yields a queen, so positions with promotions count one child per
    promoting move.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for mv in all_legal_moves(board, color, last_move):
        if depth == 1:
            nodes += 1
            continue
        child = board.copy()
        record = child.make_move(mv.from_sq, mv.to_sq)
        nodes += perft(child, opponent(color), depth - 1, record)
    return nodes


def divide(
    board: Board, color: str, depth: int, last_move: Optional[MoveRecord] = None
) -> Dict[str, int]:
    """Per-root-move perft counts, keyed by long algebraic move."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for mv in all_legal_moves(board, color, last_move):
        child = board.copy()
        record = child.make_move(mv.from_sq, mv.to_sq)
        out[mv.to_uci()] = perft(child, opponent(color), depth - 1, record)
    return out
