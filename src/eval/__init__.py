"""Static material evaluation.

Pure, deterministic, and side-effect free. Scores are in pawn units and are
positive when the position favours black.
"""

from __future__ import annotations

from typing import Dict, Final

from src.engine.board import BISHOP, BLACK, KING, KNIGHT, PAWN, QUEEN, ROOK, Board


P_VAL: Final = 1
N_VAL: Final = 3
B_VAL: Final = 3
R_VAL: Final = 5
Q_VAL: Final = 9
K_VAL: Final = 100

PIECE_VALUES: Final[Dict[str, int]] = {
    PAWN: P_VAL,
    KNIGHT: N_VAL,
    BISHOP: B_VAL,
    ROOK: R_VAL,
    QUEEN: Q_VAL,
    KING: K_VAL,
}


def evaluate(board: Board) -> int:
    """Return the material balance of ``board`` (black minus white).

    No positional or mobility terms.
    """
    total = 0
    for _sq, piece in board.pieces():
        value = PIECE_VALUES[piece.kind]
        total += value if piece.color == BLACK else -value
    return total
