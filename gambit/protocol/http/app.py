from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    value_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore
from ...config import Difficulty, Settings
from ...engine.game import Game
from ...engine.move import QUEEN, parse_square, square_name
from ...search.service import DIFFICULTY_DEPTHS


logger = logging.getLogger(__name__)

PromotionPiece = Literal["queen", "rook", "bishop", "knight"]


class CreateGameRequest(BaseModel):
    difficulty: Optional[Difficulty] = None


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str
    difficulty: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_square: str = Field(..., alias="from", description="Origin square, e.g. e2")
    to_square: str = Field(..., alias="to", description="Destination square, e.g. e4")
    promotion: PromotionPiece = QUEEN


class AIMoveRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1, le=max(DIFFICULTY_DEPTHS.values()) + 1)


class ValidMovesResponse(BaseModel):
    square: str
    moves: List[str]


class GameState(BaseModel):
    game_id: str
    fen: str
    board: List[List[Optional[str]]]
    current_turn: str
    is_check: bool
    is_checkmate: bool
    is_stalemate: bool
    last_move: Optional[str]
    move_history: List[str]
    captured_pieces: Dict[str, List[str]]


class AIMoveResponse(BaseModel):
    move: str
    notation: str
    score: int
    nodes: int
    depth: int
    time_ms: int
    state: GameState


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Gambit Chess API", version="0.1.0")

    logging.basicConfig(level=settings.log_level.upper())

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        difficulty = (req.difficulty if req else None) or settings.default_difficulty
        session = GameSession.new(difficulty)
        game_id = store.create(session)
        logger.info("game created", extra={"game_id": game_id, "difficulty": difficulty})
        return CreateGameResponse(game_id=game_id, fen=session.game.to_fen(), difficulty=difficulty)

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _game_state(game_id, _require_session(store, game_id).game)

    @app.get("/api/games/{game_id}/moves/{square}", response_model=ValidMovesResponse)
    async def valid_moves(game_id: str, square: str) -> ValidMovesResponse:
        game = _require_session(store, game_id).game
        pos = parse_square(square)
        return ValidMovesResponse(
            square=square, moves=[square_name(p) for p in game.get_valid_moves(pos)]
        )

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_session(store, game_id).game
        from_pos = parse_square(req.from_square)
        to_pos = parse_square(req.to_square)
        if not game.make_move(from_pos, to_pos, req.promotion):
            raise HTTPException(status_code=400, detail="illegal move")
        return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/ai-move", response_model=AIMoveResponse)
    async def ai_move(game_id: str, req: Optional[AIMoveRequest] = None) -> AIMoveResponse:
        session = _require_session(store, game_id)
        game = session.game
        res = session.engine.search(game, depth=req.depth if req else None)
        if res.best_move is None:
            raise HTTPException(status_code=409, detail="game is over")
        # Engine moves go through the same validation as human moves
        if not game.apply_move(res.best_move):
            raise HTTPException(status_code=500, detail="engine produced an illegal move")
        record = game.move_history[-1]
        logger.info(
            "engine move",
            extra={
                "game_id": game_id,
                "move": record.notation,
                "nodes": res.nodes,
                "time_ms": res.time_ms,
            },
        )
        return AIMoveResponse(
            move=res.best_move.to_coords(),
            notation=record.notation,
            score=res.score,
            nodes=res.nodes,
            depth=res.depth,
            time_ms=res.time_ms,
            state=_game_state(game_id, game),
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        game = _require_session(store, game_id).game
        game.undo_move()
        return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_session(store, game_id)
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        store.replace_game(game_id, game)
        return _game_state(game_id, game)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        _require_session(store, game_id)
        store.delete(game_id)
        return {"status": "deleted"}

    return app


def _require_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _game_state(game_id: str, game: Game) -> GameState:
    snap = game.get_game_state()
    history = [r.notation for r in snap.move_history]
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        board=[[p.symbol if p else None for p in row] for row in snap.board.grid],
        current_turn=snap.current_turn,
        is_check=snap.is_check,
        is_checkmate=snap.is_checkmate,
        is_stalemate=snap.is_stalemate,
        last_move=history[-1] if history else None,
        move_history=history,
        captured_pieces={c: list(v) for c, v in snap.captured_pieces.items()},
    )
