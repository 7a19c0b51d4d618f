from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    value_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.board import COLORS, Board, STARTPOS_FEN
from ...engine.game import Game
from ...engine.move import parse_uci, square_to_str, str_to_square
from ...engine.perft import perft as perft_nodes
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)

MAX_PERFT_DEPTH = 4


class SettingsRequest(BaseModel):
    ai_enabled: Optional[bool] = Field(default=None, description="Auto-play the AI color")
    difficulty: Optional[int] = Field(default=None, ge=1, le=3, description="1 easy .. 3 hard")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Long algebraic move string, e.g., e2e4")


class UndoRequest(BaseModel):
    count: Optional[int] = Field(default=None, ge=1, le=2)


class PerftRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="Position to count from; startpos when omitted")
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


class PerftResponse(BaseModel):
    nodes: int


class GameResult(BaseModel):
    status: str
    winner: Optional[str]


class GameState(BaseModel):
    game_id: str
    fen: str
    board: List[List[Optional[str]]]
    current_player: str
    legal_moves: List[str]
    in_check: bool
    game_over: bool
    result: GameResult
    last_move: Optional[str]
    move_history: List[str]
    captured: Dict[str, List[str]]
    ai_enabled: bool
    ai_color: str
    difficulty: int


class CreateGameResponse(BaseModel):
    game_id: str
    state: GameState


class MoveResponse(BaseModel):
    applied: bool
    move: Optional[str]
    ai_move: Optional[str]
    state: GameState


class DestinationsResponse(BaseModel):
    square: str
    destinations: List[str]


def create_app() -> FastAPI:
    app = FastAPI(title="Chess Game API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    # In-memory session store for games
    store = InMemorySessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[SettingsRequest] = None) -> CreateGameResponse:
        game = Game.new()
        if req is not None:
            _apply_settings(game, req)
        game_id = store.create(game)
        return CreateGameResponse(game_id=game_id, state=_state(game_id, game))

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_game(store, game_id))

    @app.get("/api/games/{game_id}/moves/{square}", response_model=DestinationsResponse)
    async def legal_destinations(game_id: str, square: str) -> DestinationsResponse:
        game = _require_game(store, game_id)
        sq = str_to_square(square)
        dests = sorted(square_to_str(d) for d in game.legal_destinations(sq))
        return DestinationsResponse(square=square, destinations=dests)

    @app.post("/api/games/{game_id}/move", response_model=MoveResponse)
    async def make_move(game_id: str, req: MoveRequest) -> MoveResponse:
        game = _require_game(store, game_id)
        move = parse_uci(req.move)
        if game.game_over:
            raise HTTPException(status_code=409, detail="game is over")
        if game.ai_to_move():
            raise HTTPException(status_code=409, detail="waiting for AI move")
        outcome = game.attempt_move(move.from_sq, move.to_sq)
        if not outcome.applied:
            raise HTTPException(status_code=400, detail="illegal move")

        ai_move: Optional[str] = None
        if game.ai_to_move():
            reply = game.play_ai_move()
            if reply.move is not None:
                ai_move = reply.move.to_uci()
                logger.info("ai reply %s in game %s", ai_move, game_id)
        return MoveResponse(
            applied=True, move=move.to_uci(), ai_move=ai_move, state=_state(game_id, game)
        )

    @app.post("/api/games/{game_id}/ai-move", response_model=MoveResponse)
    async def ai_move(game_id: str) -> MoveResponse:
        game = _require_game(store, game_id)
        if game.game_over:
            raise HTTPException(status_code=409, detail="game is over")
        outcome = game.play_ai_move()
        played = outcome.move.to_uci() if outcome.move is not None else None
        return MoveResponse(
            applied=outcome.applied, move=None, ai_move=played, state=_state(game_id, game)
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str, req: Optional[UndoRequest] = None) -> GameState:
        game = _require_game(store, game_id)
        if req is not None and req.count is not None:
            game.undo(req.count)
        else:
            game.undo_turn()
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/settings", response_model=GameState)
    async def settings(game_id: str, req: SettingsRequest) -> GameState:
        game = _require_game(store, game_id)
        _apply_settings(game, req)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/new", response_model=GameState)
    async def new_game(game_id: str) -> GameState:
        old = _require_game(store, game_id)
        game = Game.new(ai_enabled=old.ai_enabled, difficulty=old.difficulty)
        store.set(game_id, game)
        return _state(game_id, game)

    @app.post("/api/perft", response_model=PerftResponse)
    async def perft(req: PerftRequest) -> PerftResponse:
        try:
            game = Game.from_fen(req.fen or STARTPOS_FEN)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return PerftResponse(nodes=perft_nodes(game.board, game.current_player, req.depth))

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _apply_settings(game: Game, req: SettingsRequest) -> None:
    if req.ai_enabled is not None:
        game.set_ai_enabled(req.ai_enabled)
    if req.difficulty is not None:
        game.set_difficulty(req.difficulty)


def _board_symbols(board: Board) -> List[List[Optional[str]]]:
    return [[p.symbol() if p is not None else None for p in row] for row in board.grid]


def _state(game_id: str, game: Game) -> GameState:
    history = game.move_history_uci()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        board=_board_symbols(game.board),
        current_player=game.current_player,
        legal_moves=[] if game.game_over else [m.to_uci() for m in game.legal_moves()],
        in_check=game.in_check(),
        game_over=game.game_over,
        result=GameResult(status=game.result.status, winner=game.result.winner),
        last_move=history[-1] if history else None,
        move_history=history,
        captured={c: [p.symbol() for p in game.captured[c]] for c in COLORS},
        ai_enabled=game.ai_enabled,
        ai_color=game.ai_color,
        difficulty=game.difficulty,
    )


# Default app for non-factory servers
app = create_app()
