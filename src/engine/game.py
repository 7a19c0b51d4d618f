from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
from typing import Dict, List, Optional, Set

from .attacks import is_king_in_check
from .board import BLACK, PAWN, WHITE, Board, Piece, opponent
from .legality import all_legal_moves, has_legal_moves, is_legal, valid_moves_for_piece
from .move import Move, MoveRecord, Square, square_to_str
from ..search.service import SearchService


logger = logging.getLogger(__name__)

# Difficulty level -> search depth in plies
DIFFICULTY_DEPTHS: Dict[int, int] = {1: 1, 2: 2, 3: 3}
DEFAULT_DIFFICULTY = 2

NONE = "none"
CHECKMATE = "checkmate"
STALEMATE = "stalemate"


@dataclass(frozen=True)
class GameEnd:
    status: str = NONE
    winner: Optional[str] = None

    @property
    def ended(self) -> bool:
        return self.status != NONE


@dataclass
class MoveOutcome:
    applied: bool
    game: "Game"
    ended: GameEnd
    move: Optional[Move] = None


def _empty_captures() -> Dict[str, List[Piece]]:
    return {WHITE: [], BLACK: []}


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: own the canonical position, history and captures;
    validate and apply moves; undo; detect the end of the game; drive the AI.
    ``captured[color]`` holds pieces *of* that color that were taken.
    """

    board: Board
    current_player: str = WHITE
    history: List[MoveRecord] = field(default_factory=list)
    captured: Dict[str, List[Piece]] = field(default_factory=_empty_captures)
    game_over: bool = False
    result: GameEnd = field(default_factory=GameEnd)
    ai_enabled: bool = True
    difficulty: int = DEFAULT_DIFFICULTY
    ai_color: str = BLACK
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @classmethod
    def new(cls, ai_enabled: bool = True, difficulty: int = DEFAULT_DIFFICULTY) -> "Game":
        game = cls(board=Board.startpos(), ai_enabled=ai_enabled)
        game.set_difficulty(difficulty)
        return game

    @classmethod
    def from_fen(cls, fen: str, ai_enabled: bool = False) -> "Game":
        """Load a position; side to move comes from the second FEN field.

        Raises:
            ValueError: If the FEN is malformed.
        """
        board = Board.from_fen(fen)
        parts = fen.strip().split()
        current = WHITE
        if len(parts) == 6:
            if parts[1] not in ("w", "b"):
                raise ValueError("side to move must be 'w' or 'b'")
            current = WHITE if parts[1] == "w" else BLACK
        game = cls(board=board, current_player=current, ai_enabled=ai_enabled)
        game.check_game_end()
        return game

    def to_fen(self) -> str:
        stm = "w" if self.current_player == WHITE else "b"
        castling = self.board.castling_rights() or "-"
        ep = "-"
        last = self.last_move
        if last is not None and last.piece.kind == PAWN:
            (fr, fc), (tr, _tc) = last.from_sq, last.to_sq
            if abs(tr - fr) == 2:
                ep = square_to_str(((fr + tr) // 2, fc))
        fullmove = 1 + len(self.history) // 2
        return f"{self.board.placement()} {stm} {castling} {ep} 0 {fullmove}"

    @property
    def last_move(self) -> Optional[MoveRecord]:
        return self.history[-1] if self.history else None

    @property
    def search_depth(self) -> int:
        return DIFFICULTY_DEPTHS[self.difficulty]

    # --- Settings ---
    def set_difficulty(self, level: int) -> None:
        if level not in DIFFICULTY_DEPTHS:
            raise ValueError(f"difficulty must be one of {sorted(DIFFICULTY_DEPTHS)}")
        self.difficulty = level

    def set_ai_enabled(self, enabled: bool) -> None:
        self.ai_enabled = bool(enabled)

    def ai_to_move(self) -> bool:
        return self.ai_enabled and not self.game_over and self.current_player == self.ai_color

    # --- Queries ---
    def is_legal(self, from_sq: Square, to_sq: Square) -> bool:
        return is_legal(self.board, from_sq, to_sq, self.last_move)

    def legal_destinations(self, sq: Square) -> Set[Square]:
        return set(valid_moves_for_piece(self.board, sq, self.last_move))

    def legal_moves(self, color: Optional[str] = None) -> List[Move]:
        return all_legal_moves(self.board, color or self.current_player, self.last_move)

    def in_check(self, color: Optional[str] = None) -> bool:
        return is_king_in_check(self.board, color or self.current_player)

    def check_game_end(self) -> GameEnd:
        """Detect checkmate or stalemate for the side to move and record it."""
        if has_legal_moves(self.board, self.current_player, self.last_move):
            self.result = GameEnd()
            return self.result
        self.game_over = True
        if self.in_check():
            self.result = GameEnd(CHECKMATE, opponent(self.current_player))
        else:
            self.result = GameEnd(STALEMATE)
        logger.debug("game over: %s winner=%s", self.result.status, self.result.winner)
        return self.result

    # --- Mutation ---
    def attempt_move(self, from_sq: Square, to_sq: Square) -> MoveOutcome:
        """Apply the move if it is legal for the side to move.

        Rejections leave the game untouched and report ``applied=False``.
        """
        piece = self.board.piece_at(from_sq)
        if (
            self.game_over
            or piece is None
            or piece.color != self.current_player
            or not self.is_legal(from_sq, to_sq)
        ):
            return MoveOutcome(applied=False, game=self, ended=self.result)
        self.execute(from_sq, to_sq)
        return MoveOutcome(
            applied=True, game=self, ended=self.result, move=Move(from_sq, to_sq)
        )

    def execute(self, from_sq: Square, to_sq: Square) -> None:
        """Apply a move already known to be legal; does not re-validate."""
        record = self.board.make_move(from_sq, to_sq)
        self.history.append(record)
        if record.captured is not None:
            self.captured[record.captured.color].append(record.captured)
        self.current_player = opponent(self.current_player)
        logger.debug(
            "move %s%s by %s",
            square_to_str(from_sq),
            square_to_str(to_sq),
            record.piece.color,
        )
        self.check_game_end()

    def undo(self, count: int = 1) -> int:
        """Take back up to ``count`` plies; returns how many were undone.

        ``has_moved`` flags are left as they were after the move.
        """
        if count not in (1, 2):
            raise ValueError("undo count must be 1 or 2")
        undone = 0
        while undone < count and self.history:
            record = self.history.pop()
            self.board.unmake_move(record)
            restored = record.captured
            if restored is not None:
                pool = self.captured[restored.color]
                for i, p in enumerate(pool):
                    if p.kind == restored.kind and p.color == restored.color:
                        del pool[i]
                        break
            self.current_player = record.piece.color
            undone += 1
        if undone:
            self.game_over = False
            self.result = GameEnd()
            logger.debug("undo %d ply", undone)
        return undone

    def undo_turn(self) -> int:
        """Undo the human's last turn, including the AI reply when there is one."""
        count = 1
        if self.ai_enabled and self.current_player != self.ai_color and len(self.history) >= 2:
            count = 2
        return self.undo(count)

    # --- AI ---
    def request_ai_move(self, depth: Optional[int] = None) -> Optional[Move]:
        """Return the search's choice for the side to move, without playing it."""
        if self.game_over:
            return None
        return SearchService(rng=self.rng).search(self, depth=depth).best_move

    def play_ai_move(self, depth: Optional[int] = None) -> MoveOutcome:
        move = self.request_ai_move(depth)
        if move is None:
            return MoveOutcome(applied=False, game=self, ended=self.result)
        self.execute(move.from_sq, move.to_sq)
        return MoveOutcome(applied=True, game=self, ended=self.result, move=move)

    def move_history_uci(self) -> List[str]:
        return [r.move.to_uci() for r in self.history]
