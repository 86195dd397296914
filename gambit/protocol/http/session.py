from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from ...engine.game import Game
from ...search.service import SearchService


@dataclass
class GameSession:
    """A game together with the opponent engine configured for it."""

    game: Game
    difficulty: str
    engine: SearchService

    @classmethod
    def new(cls, difficulty: str, game: Optional[Game] = None) -> "GameSession":
        return cls(
            game=game if game is not None else Game.new(),
            difficulty=difficulty,
            engine=SearchService.for_difficulty(difficulty),
        )


class InMemorySessionStore:
    """Thread-safe in-memory store of game sessions keyed by `game_id`.

    The lock only guards the mapping; a session's game is not reentrant and
    must be driven by one request at a time.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, GameSession] = {}

    def create(self, session: GameSession) -> str:
        """Store `session` under a fresh `game_id` and return the id."""
        gid = str(uuid.uuid4())
        with self._lock:
            self._sessions[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(game_id)

    def replace_game(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._sessions:
                raise KeyError(game_id)
            self._sessions[game_id].game = game

    def delete(self, game_id: str) -> None:
        with self._lock:
            self._sessions.pop(game_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
