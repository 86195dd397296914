from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .move import (
    BISHOP,
    BLACK,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    WHITE,
    Position,
    opposite,
)


STARTPOS_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

TYPE_TO_CHAR = {PAWN: "p", KNIGHT: "n", BISHOP: "b", ROOK: "r", QUEEN: "q", KING: "k"}
CHAR_TO_TYPE = {v: k for k, v in TYPE_TO_CHAR.items()}

KNIGHT_OFFSETS = ((-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1))
KING_OFFSETS = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1))
ROOK_DIRS = ((-1, 0), (1, 0), (0, -1), (0, 1))
BISHOP_DIRS = ((-1, -1), (-1, 1), (1, -1), (1, 1))
QUEEN_DIRS = ROOK_DIRS + BISHOP_DIRS


@dataclass(frozen=True)
class Piece:
    type: str
    color: str

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for white, lowercase for black."""
        ch = TYPE_TO_CHAR[self.type]
        return ch.upper() if self.color == WHITE else ch

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        if ch.lower() not in CHAR_TO_TYPE:
            raise ValueError(f"invalid piece symbol: {ch!r}")
        return cls(CHAR_TO_TYPE[ch.lower()], WHITE if ch.isupper() else BLACK)


def pawn_direction(color: str) -> int:
    return -1 if color == WHITE else 1


def pawn_start_row(color: str) -> int:
    return 6 if color == WHITE else 1


def back_row(color: str) -> int:
    return 7 if color == WHITE else 0


@dataclass
class Board:
    """8x8 grid of optional pieces.

    Notes:
    - ``grid[row][col]``; row 0 holds black's back rank, row 7 white's.
    - Accessors are bounds-checked: off-board reads return ``None`` and
      off-board writes are ignored.
    """

    grid: List[List[Optional[Piece]]] = field(
        default_factory=lambda: [[None] * 8 for _ in range(8)]
    )

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board with the standard starting position."""
        return cls.from_fen(STARTPOS_PLACEMENT)

    @classmethod
    def from_fen(cls, placement: str) -> "Board":
        """Create a board from the piece-placement field of a FEN string.

        Args:
            placement (str): Eight ``/``-separated ranks, rank 8 first.

        Returns:
            Board: Board holding the described pieces.

        Raises:
            ValueError: If the placement has the wrong number of ranks, an
                invalid piece letter, or a rank not summing to 8 squares.
        """
        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        board = cls.empty()
        for row, rank in enumerate(ranks):
            col = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    col += n
                else:
                    if col >= 8:
                        raise ValueError("too many squares in FEN rank")
                    board.grid[row][col] = Piece.from_symbol(ch)
                    col += 1
            if col != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
        return board

    def to_fen(self) -> str:
        """Serialize the piece placement into a FEN field."""
        ranks: List[str] = []
        for row in self.grid:
            run = 0
            out = []
            for piece in row:
                if piece is None:
                    run += 1
                    continue
                if run:
                    out.append(str(run))
                    run = 0
                out.append(piece.symbol)
            if run:
                out.append(str(run))
            ranks.append("".join(out))
        return "/".join(ranks)

    def copy(self) -> "Board":
        # Pieces are immutable, so copying the rows is enough
        return Board(grid=[list(row) for row in self.grid])

    def render(self) -> str:
        """Return an ASCII diagram with rank 8 on top."""
        lines = []
        for row_idx, row in enumerate(self.grid):
            cells = " ".join(p.symbol if p else "." for p in row)
            lines.append(f"{8 - row_idx} {cells}")
        lines.append("  a b c d e f g h")
        return "\n".join(lines)

    def get_piece(self, pos: Position) -> Optional[Piece]:
        if not pos.on_board():
            return None
        return self.grid[pos.row][pos.col]

    def set_piece(self, pos: Position, piece: Optional[Piece]) -> None:
        if not pos.on_board():
            return
        self.grid[pos.row][pos.col] = piece

    def pieces(self, color: Optional[str] = None) -> Iterator[Tuple[Position, Piece]]:
        """Yield ``(position, piece)`` for occupied squares in row-major order."""
        for r in range(8):
            for c in range(8):
                piece = self.grid[r][c]
                if piece is not None and (color is None or piece.color == color):
                    yield Position(r, c), piece

    def find_king(self, color: str) -> Optional[Position]:
        for pos, piece in self.pieces(color):
            if piece.type == KING:
                return pos
        return None

    def is_square_attacked(self, pos: Position, defending_color: str) -> bool:
        """Return True if any piece of the other color attacks ``pos``.

        Uses raw attack sets only, so it never consults legality filtering.
        """
        attacker = opposite(defending_color)
        for from_pos, piece in self.pieces(attacker):
            if pos in ATTACK_GENERATORS[piece.type](self, from_pos, attacker):
                return True
        return False

    def is_in_check(self, color: str) -> bool:
        king = self.find_king(color)
        if king is None:
            return False
        return self.is_square_attacked(king, color)


# --- Pseudo-legal destinations, one function per piece type ---


def _offset_moves(
    board: Board, pos: Position, color: str, offsets: Tuple[Tuple[int, int], ...]
) -> List[Position]:
    moves: List[Position] = []
    for drow, dcol in offsets:
        to = pos.offset(drow, dcol)
        if not to.on_board():
            continue
        target = board.get_piece(to)
        if target is None or target.color != color:
            moves.append(to)
    return moves


def _sliding_moves(
    board: Board, pos: Position, color: str, directions: Tuple[Tuple[int, int], ...]
) -> List[Position]:
    moves: List[Position] = []
    for drow, dcol in directions:
        to = pos.offset(drow, dcol)
        while to.on_board():
            target = board.get_piece(to)
            if target is None:
                moves.append(to)
            else:
                if target.color != color:
                    moves.append(to)
                break
            to = to.offset(drow, dcol)
    return moves


def pawn_moves(board: Board, pos: Position, color: str) -> List[Position]:
    """Pushes and ordinary diagonal captures (en passant is added by the game)."""
    moves: List[Position] = []
    step = pawn_direction(color)
    one = pos.offset(step, 0)
    if one.on_board() and board.get_piece(one) is None:
        moves.append(one)
        two = pos.offset(2 * step, 0)
        if pos.row == pawn_start_row(color) and board.get_piece(two) is None:
            moves.append(two)
    for dcol in (-1, 1):
        cap = pos.offset(step, dcol)
        target = board.get_piece(cap)
        if target is not None and target.color != color:
            moves.append(cap)
    return moves


def knight_moves(board: Board, pos: Position, color: str) -> List[Position]:
    return _offset_moves(board, pos, color, KNIGHT_OFFSETS)


def bishop_moves(board: Board, pos: Position, color: str) -> List[Position]:
    return _sliding_moves(board, pos, color, BISHOP_DIRS)


def rook_moves(board: Board, pos: Position, color: str) -> List[Position]:
    return _sliding_moves(board, pos, color, ROOK_DIRS)


def queen_moves(board: Board, pos: Position, color: str) -> List[Position]:
    return _sliding_moves(board, pos, color, QUEEN_DIRS)


def king_moves(board: Board, pos: Position, color: str) -> List[Position]:
    """Adjacent steps only; castling needs rights and is added by the game."""
    return _offset_moves(board, pos, color, KING_OFFSETS)


MoveGenerator = Callable[[Board, Position, str], List[Position]]

MOVE_GENERATORS: Dict[str, MoveGenerator] = {
    PAWN: pawn_moves,
    KNIGHT: knight_moves,
    BISHOP: bishop_moves,
    ROOK: rook_moves,
    QUEEN: queen_moves,
    KING: king_moves,
}


# --- Raw attack sets used for check detection ---


def pawn_attacks(board: Board, pos: Position, color: str) -> List[Position]:
    step = pawn_direction(color)
    return [sq for sq in (pos.offset(step, -1), pos.offset(step, 1)) if sq.on_board()]


def king_attacks(board: Board, pos: Position, color: str) -> List[Position]:
    return [sq for sq in (pos.offset(dr, dc) for dr, dc in KING_OFFSETS) if sq.on_board()]


ATTACK_GENERATORS: Dict[str, MoveGenerator] = {
    PAWN: pawn_attacks,
    KNIGHT: knight_moves,
    BISHOP: bishop_moves,
    ROOK: rook_moves,
    QUEEN: queen_moves,
    KING: king_attacks,
}
