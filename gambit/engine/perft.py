from __future__ import annotations

from typing import Dict

from .game import Game


def perft(game: Game, depth: int) -> int:
    """Compute perft node count for `game` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are visited with in-place push/pop, so the game is left exactly
    as it was found.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = game.legal_moves()
    if depth == 1:
        return len(moves)

    nodes = 0
    for m in moves:
        game.push(m)
        try:
            nodes += perft(game, depth - 1)
        finally:
            game.pop()
    return nodes


def divide(game: Game, depth: int) -> Dict[str, int]:
    """Return per-root-move perft counts keyed by coordinate move string."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    counts: Dict[str, int] = {}
    for m in game.legal_moves():
        game.push(m)
        try:
            counts[m.to_coords()] = perft(game, depth - 1)
        finally:
            game.pop()
    return counts
