from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .move import MoveRecord, Square


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

WHITE = "white"
BLACK = "black"
COLORS = (WHITE, BLACK)

PAWN = "pawn"
KNIGHT = "knight"
BISHOP = "bishop"
ROOK = "rook"
QUEEN = "queen"
KING = "king"

BACK_RANK = (ROOK, KNIGHT, BISHOP, QUEEN, KING, BISHOP, KNIGHT, ROOK)

KIND_TO_CHAR = {
    PAWN: "p",
    KNIGHT: "n",
    BISHOP: "b",
    ROOK: "r",
    QUEEN: "q",
    KING: "k",
}
CHAR_TO_KIND = {v: k for k, v in KIND_TO_CHAR.items()}

# Home rows: back rank and pawn rank per color
HOME_ROW = {WHITE: 7, BLACK: 0}
PAWN_ROW = {WHITE: 6, BLACK: 1}
FORWARD = {WHITE: -1, BLACK: 1}

# Castling rook columns: king destination col -> (rook origin col, rook target col)
CASTLE_ROOK_COLS = {6: (7, 5), 2: (0, 3)}


def opponent(color: str) -> str:
    return BLACK if color == WHITE else WHITE


@dataclass
class Piece:
    kind: str
    color: str
    has_moved: bool = False

    def symbol(self) -> str:
        ch = KIND_TO_CHAR[self.kind]
        return ch.upper() if self.color == WHITE else ch

    def copy(self) -> "Piece":
        return Piece(self.kind, self.color, self.has_moved)


def _empty_grid() -> List[List[Optional[Piece]]]:
    return [[None] * 8 for _ in range(8)]


@dataclass
class Board:
    """8x8 board of optional pieces plus cached king squares.

    Notes:
    - Squares are ``(row, col)``; row 0 is black's back rank (rank 8), row 7
      is white's (rank 1).
    - ``king_positions`` must move in lockstep with the kings on ``grid``.
    """

    grid: List[List[Optional[Piece]]] = field(default_factory=_empty_grid)
    king_positions: Dict[str, Square] = field(default_factory=dict)

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board with the standard starting setup."""
        board = cls()
        for color in COLORS:
            for col in range(8):
                board.grid[PAWN_ROW[color]][col] = Piece(PAWN, color)
                board.grid[HOME_ROW[color]][col] = Piece(BACK_RANK[col], color)
            board.king_positions[color] = (HOME_ROW[color], 4)
        return board

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a FEN string or from its placement field alone.

        Args:
            fen (str): Full six-field FEN or just the piece placement.

        Returns:
            Board: Board with ``has_moved`` inferred for every piece.

        Raises:
            ValueError: If the placement is malformed, the castling field is
                invalid, or either side does not have exactly one king.

        Notes:
            Without a castling field, kings and rooks on their home squares
            count as unmoved. With one, a king is unmoved iff its side keeps
            a castling right and a corner rook iff its own right is listed.
            Pawns are unmoved only on their start row.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) not in (1, 6):
            raise ValueError("FEN must have 1 or 6 fields")
        placement = parts[0]
        castling: Optional[str] = None
        if len(parts) == 6:
            castling = parts[2]
            if castling != "-" and any(ch not in "KQkq" for ch in castling):
                raise ValueError("invalid castling rights")

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        board = cls()
        for row, rank in enumerate(ranks):
            col = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    col += n
                    continue
                if ch.lower() not in CHAR_TO_KIND:
                    raise ValueError(f"invalid piece in FEN: {ch!r}")
                if col >= 8:
                    raise ValueError("too many squares in FEN rank")
                color = WHITE if ch.isupper() else BLACK
                kind = CHAR_TO_KIND[ch.lower()]
                if kind == KING:
                    if color in board.king_positions:
                        raise ValueError(f"more than one {color} king in FEN")
                    board.king_positions[color] = (row, col)
                board.grid[row][col] = Piece(kind, color)
                col += 1
            if col != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
        for color in COLORS:
            if color not in board.king_positions:
                raise ValueError(f"missing {color} king in FEN")

        for (row, col), piece in board.pieces():
            piece.has_moved = not _unmoved(piece, row, col, castling)
        return board

    def placement(self) -> str:
        """Serialize piece placement as the first FEN field."""
        ranks: List[str] = []
        for row in range(8):
            run = 0
            out = []
            for col in range(8):
                piece = self.grid[row][col]
                if piece is None:
                    run += 1
                    continue
                if run:
                    out.append(str(run))
                    run = 0
                out.append(piece.symbol())
            if run:
                out.append(str(run))
            ranks.append("".join(out))
        return "/".join(ranks)

    def castling_rights(self) -> str:
        """Return castling rights implied by ``has_moved`` flags, ``KQkq`` order."""
        rights = []
        for color, (king_ch, queen_ch) in ((WHITE, "KQ"), (BLACK, "kq")):
            row = HOME_ROW[color]
            king = self.grid[row][4]
            if king is None or king.kind != KING or king.color != color or king.has_moved:
                continue
            for rook_col, ch in ((7, king_ch), (0, queen_ch)):
                rook = self.grid[row][rook_col]
                if (
                    rook is not None
                    and rook.kind == ROOK
                    and rook.color == color
                    and not rook.has_moved
                ):
                    rights.append(ch)
        return "".join(rights)

    def piece_at(self, sq: Square) -> Optional[Piece]:
        return self.grid[sq[0]][sq[1]]

    def pieces(self, color: Optional[str] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield ``(square, piece)`` in row-major order, optionally for one color."""
        for row in range(8):
            for col in range(8):
                piece = self.grid[row][col]
                if piece is not None and (color is None or piece.color == color):
                    yield (row, col), piece

    def copy(self) -> "Board":
        """Value copy of the grid and the king positions."""
        grid = [[p.copy() if p is not None else None for p in row] for row in self.grid]
        return Board(grid=grid, king_positions=dict(self.king_positions))

    def make_move(self, from_sq: Square, to_sq: Square) -> MoveRecord:
        """Apply a move in place and return its history record.

        The move is assumed legal. Handles castling rook relocation, en
        passant removal, ordinary captures, king tracking, and promotion to
        a queen.
        """
        fr, fc = from_sq
        tr, tc = to_sq
        piece = self.grid[fr][fc]
        if piece is None:
            raise ValueError("no piece to move from from_sq")
        captured = self.grid[tr][tc]
        castling = False
        en_passant = False

        if piece.kind == KING and abs(tc - fc) == 2:
            rook_col, rook_target = CASTLE_ROOK_COLS[tc]
            rook = self.grid[fr][rook_col]
            self.grid[fr][rook_target] = rook
            self.grid[fr][rook_col] = None
            if rook is not None:
                rook.has_moved = True
            castling = True

        if piece.kind == PAWN and abs(tc - fc) == 1 and captured is None:
            # En passant: the victim sits beside the origin, on the target file
            captured = self.grid[fr][tc]
            self.grid[fr][tc] = None
            en_passant = True

        self.grid[tr][tc] = piece
        self.grid[fr][fc] = None
        piece.has_moved = True
        if piece.kind == KING:
            self.king_positions[piece.color] = (tr, tc)

        if piece.kind == PAWN and tr in (0, 7):
            self.grid[tr][tc] = Piece(QUEEN, piece.color, has_moved=True)

        return MoveRecord(
            from_sq=from_sq,
            to_sq=to_sq,
            piece=piece,
            captured=captured,
            en_passant=en_passant,
            castling=castling,
        )

    def unmake_move(self, record: MoveRecord) -> None:
        """Reverse ``record`` on the grid and king positions.

        ``has_moved`` flags keep their post-move values.
        """
        fr, fc = record.from_sq
        tr, tc = record.to_sq
        piece = record.piece
        self.grid[fr][fc] = piece
        if record.en_passant:
            self.grid[tr][tc] = None
            self.grid[fr][tc] = record.captured
        else:
            self.grid[tr][tc] = record.captured

        if record.castling:
            rook_col, rook_target = CASTLE_ROOK_COLS[tc]
            self.grid[fr][rook_col] = self.grid[fr][rook_target]
            self.grid[fr][rook_target] = None

        if piece.kind == KING:
            self.king_positions[piece.color] = (fr, fc)


def _unmoved(piece: Piece, row: int, col: int, castling: Optional[str]) -> bool:
    if piece.kind == PAWN:
        return row == PAWN_ROW[piece.color]
    if row != HOME_ROW[piece.color]:
        return False
    white = piece.color == WHITE
    if piece.kind == KING:
        if col != 4:
            return False
        if castling is None:
            return True
        return any(ch in castling for ch in ("KQ" if white else "kq"))
    if piece.kind == ROOK and col in (0, 7):
        if castling is None:
            return True
        right = ("K" if col == 7 else "Q") if white else ("k" if col == 7 else "q")
        return right in castling
    # Minor pieces and queen: unmoved only on their original home square
    return BACK_RANK[col] == piece.kind
