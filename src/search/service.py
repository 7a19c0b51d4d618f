from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import random
import time
from typing import TYPE_CHECKING, Optional

from src.engine.board import BLACK, WHITE, Board
from src.engine.legality import all_legal_moves, simulate_move
from src.engine.move import Move, MoveRecord
from src.eval import evaluate

if TYPE_CHECKING:
    from src.engine.game import Game


logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[float]
    nodes: int
    depth: int
    time_ms: int
    fallback: bool = False


class SearchService:
    """Fixed-depth minimax with alpha-beta pruning over material evaluation.

    Black maximizes, white minimizes. Every ply works on a scratch board made
    by ``simulate_move``; canonical game state is never touched.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def search(self, game: "Game", depth: Optional[int] = None) -> SearchResult:
        """Choose a move for the side to move of ``game``."""
        return self.choose_move(
            game.board,
            game.current_player,
            depth if depth is not None else game.search_depth,
            last_move=game.last_move,
        )

    def choose_move(
        self,
        board: Board,
        color: str,
        depth: int,
        last_move: Optional[MoveRecord] = None,
    ) -> SearchResult:
        """Return the best move for ``color`` at ``depth`` plies.

        Args:
            board (Board): Position to search; left unchanged.
            color (str): Side to move.
            depth (int): Search depth in plies, at least 1.
            last_move (Optional[MoveRecord]): Move that led to ``board``, for
                en passant.

        Returns:
            SearchResult: ``best_move`` is None only when ``color`` has no
                legal moves.

        Notes:
            Each root move is searched with a fresh (-inf, +inf) window, so
            pruning never crosses sibling root moves. The first move with a
            strictly better score wins; if no move beats the initial
            sentinel a random legal move is returned.
        """
        if depth < 1:
            raise ValueError("depth must be >= 1")
        start = time.perf_counter()
        nodes = 0

        def minimax(
            d: int,
            node: Board,
            maximizing: bool,
            alpha: float,
            beta: float,
            prev: Optional[MoveRecord],
        ) -> float:
            nonlocal nodes
            nodes += 1
            if d == 0:
                return evaluate(node)
            side = BLACK if maximizing else WHITE
            best = -math.inf if maximizing else math.inf
            for mv in all_legal_moves(node, side, prev):
                child = simulate_move(node, mv.from_sq, mv.to_sq)
                rec = _record(node, mv)
                value = minimax(d - 1, child, not maximizing, alpha, beta, rec)
                if maximizing:
                    best = max(best, value)
                    alpha = max(alpha, best)
                else:
                    best = min(best, value)
                    beta = min(beta, best)
                if beta <= alpha:
                    break
            return best

        maximizing = color == BLACK
        moves = all_legal_moves(board, color, last_move)
        best_value = -math.inf if maximizing else math.inf
        best_move: Optional[Move] = None
        for mv in moves:
            child = simulate_move(board, mv.from_sq, mv.to_sq)
            value = minimax(
                depth - 1, child, not maximizing, -math.inf, math.inf, _record(board, mv)
            )
            if (maximizing and value > best_value) or (not maximizing and value < best_value):
                best_value = value
                best_move = mv

        fallback = False
        if best_move is None and moves:
            best_move = self.rng.choice(moves)
            fallback = True
        time_ms = int((time.perf_counter() - start) * 1000)
        score = best_value if moves else None
        logger.debug(
            "search color=%s depth=%d best=%s score=%s nodes=%d time_ms=%d fallback=%s",
            color,
            depth,
            best_move.to_uci() if best_move else None,
            score,
            nodes,
            time_ms,
            fallback,
        )
        return SearchResult(
            best_move=best_move,
            score=score,
            nodes=nodes,
            depth=depth,
            time_ms=time_ms,
            fallback=fallback,
        )


def _record(board: Board, mv: Move) -> Optional[MoveRecord]:
    """History entry for ``mv`` as seen by the next ply's en passant check."""
    piece = board.piece_at(mv.from_sq)
    if piece is None:
        return None
    return MoveRecord(mv.from_sq, mv.to_sq, piece)
