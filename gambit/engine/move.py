from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


WHITE = "white"
BLACK = "black"

PAWN = "pawn"
KNIGHT = "knight"
BISHOP = "bishop"
ROOK = "rook"
QUEEN = "queen"
KING = "king"

PROMOTION_PIECES = (QUEEN, ROOK, BISHOP, KNIGHT)
PROMOTION_CHARS = {"q": QUEEN, "r": ROOK, "b": BISHOP, "n": KNIGHT}
PROMOTION_TO_CHAR = {v: k for k, v in PROMOTION_CHARS.items()}

FILES = "abcdefgh"


def opposite(color: str) -> str:
    return BLACK if color == WHITE else WHITE


@dataclass(frozen=True)
class Position:
    """Board coordinate.

    Attributes:
        row (int): 0 is black's back rank (rank 8), 7 is white's (rank 1).
        col (int): 0 is the a-file, 7 is the h-file.
    """

    row: int
    col: int

    def on_board(self) -> bool:
        return 0 <= self.row < 8 and 0 <= self.col < 8

    def offset(self, drow: int, dcol: int) -> "Position":
        return Position(self.row + drow, self.col + dcol)


@dataclass(frozen=True)
class Move:
    """Engine move representation.

    Attributes:
        from_pos (Position): Origin square.
        to_pos (Position): Destination square.
        promotion (Optional[str]): Promotion piece type, if any.
    """

    from_pos: Position
    to_pos: Position
    promotion: Optional[str] = None

    def to_coords(self) -> str:
        """Serialize the move into coordinate form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = PROMOTION_TO_CHAR.get(self.promotion, "") if self.promotion else ""
        return square_name(self.from_pos) + square_name(self.to_pos) + promo


def parse_move(text: str) -> Move:
    """Parse a coordinate move string.

    Args:
        text (str): Move such as ``"e2e4"`` or ``"e7e8q"``.

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(text) not in (4, 5):
        raise ValueError(f"invalid move length: {text!r}")
    from_pos = parse_square(text[0:2])
    to_pos = parse_square(text[2:4])
    promo: Optional[str] = None
    if len(text) == 5:
        ch = text[4].lower()
        if ch not in PROMOTION_CHARS:
            raise ValueError(f"invalid promotion piece: {ch!r}")
        promo = PROMOTION_CHARS[ch]
    return Move(from_pos, to_pos, promo)


def parse_square(name: str) -> Position:
    """Convert a square name into a board position.

    Args:
        name (str): Square name such as ``"e4"``.

    Returns:
        Position: Row/column coordinate, with rank 8 on row 0.

    Raises:
        ValueError: If ``name`` is not a valid square.
    """
    if len(name) != 2 or name[0] not in FILES or name[1] < "1" or name[1] > "8":
        raise ValueError(f"invalid square: {name!r}")
    return Position(8 - int(name[1]), FILES.index(name[0]))


def square_name(pos: Position) -> str:
    """Convert a board position into a square name.

    Raises:
        ValueError: If ``pos`` is off the board.
    """
    if not pos.on_board():
        raise ValueError(f"invalid position: ({pos.row}, {pos.col})")
    return FILES[pos.col] + str(8 - pos.row)
