from __future__ import annotations

import logging
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from gambit.engine.game import Game
from gambit.engine.move import Move
from gambit.eval import evaluate


logger = logging.getLogger(__name__)

DIFFICULTY_DEPTHS: Dict[str, int] = {"easy": 2, "medium": 3, "hard": 4}
DEFAULT_DEPTH = DIFFICULTY_DEPTHS["medium"]

INF = 10_000_000


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: int
    nodes: int
    depth: int
    time_ms: int


@contextmanager
def applied(game: Game, move: Move) -> Iterator[None]:
    """Apply ``move`` for the duration of the block and always revert it."""
    game.push(move)
    try:
        yield
    finally:
        game.pop()


class SearchService:
    """Fixed-depth minimax with alpha-beta pruning.

    The ply budget is chosen once per instance. The root candidate list is
    shuffled with the instance's own RNG so equally scored moves vary between
    calls; pass ``seed`` for reproducible play or ``shuffle=False`` to keep
    generation order.

    The search mutates and reverts the game in place: it is not reentrant and
    nothing else may touch the game while it runs.
    """

    def __init__(
        self,
        depth: int = DEFAULT_DEPTH,
        *,
        seed: Optional[int] = None,
        shuffle: bool = True,
        enable_pruning: bool = True,
    ) -> None:
        if depth < 1:
            raise ValueError("depth must be >= 1")
        self.depth = depth
        self.shuffle = shuffle
        self.enable_pruning = enable_pruning
        self._rng = random.Random(seed)

    @classmethod
    def for_difficulty(cls, difficulty: str, **kwargs) -> "SearchService":
        if difficulty not in DIFFICULTY_DEPTHS:
            raise ValueError(f"unknown difficulty: {difficulty!r}")
        return cls(DIFFICULTY_DEPTHS[difficulty], **kwargs)

    def select_move(self, game: Game, depth: Optional[int] = None) -> Optional[Move]:
        """Return the chosen move, or None when the side to move has none."""
        return self.search(game, depth).best_move

    def search(self, game: Game, depth: Optional[int] = None) -> SearchResult:
        depth = self.depth if depth is None else depth
        if depth < 1:
            raise ValueError("depth must be >= 1")
        start = time.perf_counter()
        nodes = 0
        enable_pruning = self.enable_pruning

        def minimax(d: int, alpha: int, beta: int, maximizing: bool) -> int:
            # Scores are from the point of view of the side that maximizes;
            # evaluate() is relative to the side to move, so flip it at
            # minimizing nodes.
            nonlocal nodes
            nodes += 1
            moves = game.legal_moves() if d > 0 else []
            if not moves:
                score = evaluate(game)
                return score if maximizing else -score

            if maximizing:
                best = -INF
                for m in moves:
                    with applied(game, m):
                        value = minimax(d - 1, alpha, beta, False)
                    best = max(best, value)
                    alpha = max(alpha, value)
                    if enable_pruning and beta <= alpha:
                        break
                return best

            best = INF
            for m in moves:
                with applied(game, m):
                    value = minimax(d - 1, alpha, beta, True)
                best = min(best, value)
                beta = min(beta, value)
                if enable_pruning and beta <= alpha:
                    break
            return best

        moves = game.legal_moves()
        if not moves:
            return SearchResult(
                best_move=None,
                score=evaluate(game),
                nodes=1,
                depth=depth,
                time_ms=int((time.perf_counter() - start) * 1000),
            )

        if self.shuffle:
            self._rng.shuffle(moves)

        best_move: Optional[Move] = None
        best_score = -INF
        for m in moves:
            with applied(game, m):
                # Child is scored for the opponent, who maximizes there
                score = -minimax(depth - 1, -INF, INF, True)
            if score > best_score:
                best_score = score
                best_move = m

        result = SearchResult(
            best_move=best_move,
            score=best_score,
            nodes=nodes,
            depth=depth,
            time_ms=int((time.perf_counter() - start) * 1000),
        )
        logger.debug(
            "search done depth=%d nodes=%d score=%d time_ms=%d best=%s",
            result.depth,
            result.nodes,
            result.score,
            result.time_ms,
            best_move.to_coords() if best_move else None,
        )
        return result
