"""Static evaluation: material plus pawn/knight square tables.

Pure and deterministic apart from the terminal checks, which query the game
for legal moves without changing it.
"""

from __future__ import annotations

from typing import Final, List

from gambit.engine.board import Board
from gambit.engine.game import Game
from gambit.engine.move import BISHOP, KING, KNIGHT, PAWN, QUEEN, ROOK, WHITE


# Material values in centipawns; the king value is a weight, not a mate signal
PIECE_VALUES: Final = {
    PAWN: 100,
    KNIGHT: 320,
    BISHOP: 330,
    ROOK: 500,
    QUEEN: 900,
    KING: 20000,
}

MATE_SCORE: Final = 100_000

# Square tables from white's point of view, row 0 = rank 8.
# fmt: off
PAWN_TABLE: Final[List[List[int]]] = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [50, 50, 50, 50, 50, 50, 50, 50],
    [10, 10, 20, 30, 30, 20, 10, 10],
    [5, 5, 10, 25, 25, 10, 5, 5],
    [0, 0, 0, 20, 20, 0, 0, 0],
    [5, -5, -10, 0, 0, -10, -5, 5],
    [5, 10, 10, -20, -20, 10, 10, 5],
    [0, 0, 0, 0, 0, 0, 0, 0],
]

KNIGHT_TABLE: Final[List[List[int]]] = [
    [-50, -40, -30, -30, -30, -30, -40, -50],
    [-40, -20, 0, 0, 0, 0, -20, -40],
    [-30, 0, 10, 15, 15, 10, 0, -30],
    [-30, 5, 15, 20, 20, 15, 5, -30],
    [-30, 0, 15, 20, 20, 15, 0, -30],
    [-30, 5, 10, 15, 15, 10, 5, -30],
    [-40, -20, 0, 5, 5, 0, -20, -40],
    [-50, -40, -30, -30, -30, -30, -40, -50],
]
# fmt: on

SQUARE_TABLES: Final = {PAWN: PAWN_TABLE, KNIGHT: KNIGHT_TABLE}


def material_balance(board: Board) -> int:
    """Return material + square-table score in centipawns.

    Positive means advantage for White. Black pieces read the tables
    mirrored vertically.
    """
    score = 0
    for pos, piece in board.pieces():
        value = PIECE_VALUES[piece.type]
        table = SQUARE_TABLES.get(piece.type)
        if table is not None:
            row = pos.row if piece.color == WHITE else 7 - pos.row
            value += table[row][pos.col]
        score += value if piece.color == WHITE else -value
    return score


def evaluate(game: Game) -> int:
    """Return the score of ``game`` for the side to move.

    Terminal positions override material: a side to move that is
    checkmated scores ``-MATE_SCORE`` (best possible for the side that gave
    mate) and stalemate scores exactly 0.
    """
    if not game.has_legal_moves():
        return -MATE_SCORE if game.is_in_check() else 0
    score = material_balance(game.board)
    return score if game.current_turn == WHITE else -score
