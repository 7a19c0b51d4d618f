from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from .board import Piece


# (row, col); row 0 is black's back rank, row 7 is white's back rank.
Square = Tuple[int, int]

# Promotion is always to a queen; a trailing "q" is tolerated on input.
PROMOTION_PIECES = {"q"}


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        from_sq (Square): Origin square as ``(row, col)``.
        to_sq (Square): Destination square as ``(row, col)``.
    """

    from_sq: Square
    to_sq: Square

    def to_uci(self) -> str:
        """Serialize the move into long algebraic form.

        Returns:
            str: Move encoded like ``"e2e4"``.
        """
        return square_to_str(self.from_sq) + square_to_str(self.to_sq)


@dataclass(frozen=True)
class MoveRecord:
    """History entry for one executed move.

    ``piece`` is the piece object that moved (the original pawn for a
    promotion); ``captured`` is whatever was taken, including an en passant
    pawn.
    """

    from_sq: Square
    to_sq: Square
    piece: "Piece"
    captured: Optional["Piece"] = None
    en_passant: bool = False
    castling: bool = False

    @property
    def move(self) -> Move:
        return Move(self.from_sq, self.to_sq)


def parse_uci(uci: str) -> Move:
    """Parse a long algebraic move string.

    Args:
        uci (str): Move such as ``"e2e4"``; ``"e7e8q"`` is accepted as well.

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or names a
            promotion piece other than a queen.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    if len(uci) == 5:
        promo = uci[4].lower()
        if promo not in PROMOTION_PIECES:
            raise ValueError(f"unsupported promotion piece: {promo!r}")
    return Move(from_sq, to_sq)


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a ``(row, col)`` square.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: ``(row, col)`` with row 0 on rank 8.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    col = ord(s[0]) - ord("a")
    row = 8 - int(s[1])
    return (row, col)


def square_to_str(sq: Square) -> str:
    """Convert a ``(row, col)`` square into algebraic notation.

    Raises:
        ValueError: If ``sq`` lies off the board.
    """
    row, col = sq
    if not in_bounds(row, col):
        raise ValueError(f"invalid square: {sq!r}")
    return chr(ord("a") + col) + str(8 - row)


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < 8 and 0 <= col < 8
