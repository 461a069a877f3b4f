from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, model_validator

from .error import (
    exception_handler,
    http_exception_handler,
    invariant_violation_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...config import Settings, get_settings
from ...engine.errors import IllegalMoveError, InvariantViolation, LayoutError
from ...engine.game import Game
from ...engine.move import parse_uci
from ...engine.pieces import Side
from ...engine.square import Square


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    layout: Optional[str] = Field(default=None, description="FEN-style layout")


class CreateGameResponse(BaseModel):
    game_id: str
    layout: str


class MoveRequest(BaseModel):
    from_sq: Optional[str] = Field(default=None, description="Origin square, e.g. e2")
    to_sq: Optional[str] = Field(
        default=None, description="Destination square; the rook's square when castling"
    )
    move: Optional[str] = Field(default=None, description="Both squares at once, e.g. e2e4")

    @model_validator(mode="after")
    def require_squares(self) -> "MoveRequest":
        if self.move is None and (self.from_sq is None or self.to_sq is None):
            raise ValueError("either 'move' or both 'from_sq' and 'to_sq' are required")
        return self


class PromotionRequest(BaseModel):
    square: str = Field(..., description="Square of the pawn awaiting promotion")
    piece: str = Field(..., description="One of q, r, b, n")


class LegalMovesResponse(BaseModel):
    square: str
    moves: List[str]


class MoveStatusResponse(BaseModel):
    from_sq: str
    to_sq: str
    status: str
    kind: str


class GameState(BaseModel):
    game_id: str
    layout: str
    active_side: str
    king_status: Dict[str, str]
    outcome: str
    outcome_cause: str
    paused: bool
    drawn: bool
    pending_promotion: Optional[str]
    score: Dict[str, int]
    castling: str
    last_move: Optional[str]
    move_history: List[str]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Chess Rules API", version="0.1.0")
    app.state.settings = settings

    # Basic logging setup
    logging.basicConfig(level=settings.log_level.upper())

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    # Preserve FastAPI 422 validation behavior and structured HTTP errors
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(InvariantViolation, invariant_violation_handler)
    app.add_exception_handler(Exception, exception_handler)

    # In-memory session store for games
    store = InMemorySessionStore()
    app.state.store = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        layout = (req.layout if req is not None else None) or settings.default_layout
        try:
            game = Game.from_layout(layout)
        except LayoutError as e:
            raise HTTPException(status_code=400, detail=f"invalid layout: {e}")
        game_id = store.create(game)
        logger.info("created game %s", game_id)
        return CreateGameResponse(game_id=game_id, layout=game.to_layout())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        with _locked_game(store, game_id) as game:
            return _game_state(game_id, game)

    @app.get("/api/games/{game_id}/moves/{square}", response_model=LegalMovesResponse)
    async def legal_moves(game_id: str, square: str) -> LegalMovesResponse:
        sq = _parse_square(square)
        with _locked_game(store, game_id) as game:
            moves = game.legal_moves(sq)
        return LegalMovesResponse(square=str(sq), moves=[str(m) for m in moves])

    @app.get("/api/games/{game_id}/status", response_model=MoveStatusResponse)
    async def move_status(game_id: str, from_sq: str, to_sq: str) -> MoveStatusResponse:
        origin, target = _parse_square(from_sq), _parse_square(to_sq)
        with _locked_game(store, game_id) as game:
            status = game.move_status(origin, target)
            kind = game.move_type(origin, target)
        return MoveStatusResponse(
            from_sq=str(origin), to_sq=str(target), status=status.value, kind=kind.value
        )

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        origin, target = _requested_squares(req)
        with _locked_game(store, game_id) as game:
            try:
                game.apply_move(origin, target)
            except IllegalMoveError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/promotion", response_model=GameState)
    async def promote(game_id: str, req: PromotionRequest) -> GameState:
        with _locked_game(store, game_id) as game:
            side = game.board.active_side
            if not game.upgrade_piece(req.square, req.piece, side):
                raise HTTPException(status_code=400, detail="promotion rejected")
            return _game_state(game_id, game)

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        logger.info("deleted game %s", game_id)
        return Response(status_code=204)

    return app


@contextmanager
def _locked_game(store: InMemorySessionStore, game_id: str) -> Iterator[Game]:
    with store.locked(game_id) as game:
        if game is None:
            raise HTTPException(status_code=404, detail="game not found")
        yield game


def _parse_square(name: str) -> Square:
    try:
        return Square.parse(name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _requested_squares(req: MoveRequest) -> Tuple[Square, Square]:
    if req.move is not None:
        try:
            move = parse_uci(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return move.from_sq, move.to_sq
    if req.from_sq is None or req.to_sq is None:
        raise HTTPException(status_code=400, detail="provide either move or from_sq and to_sq")
    return _parse_square(req.from_sq), _parse_square(req.to_sq)


def _game_state(game_id: str, game: Game) -> GameState:
    board = game.board
    history = game.move_history_uci()
    outcome = game.outcome()
    return GameState(
        game_id=game_id,
        layout=game.to_layout(),
        active_side=str(board.active_side),
        king_status={str(side): game.king_status(side).value for side in Side},
        outcome=outcome.value,
        outcome_cause=outcome.cause,
        paused=board.paused,
        drawn=board.drawn,
        pending_promotion=str(board.pending_promotion) if board.pending_promotion else None,
        score={str(side): board.score[side] for side in Side},
        castling=board.castling or "-",
        last_move=history[-1] if history else None,
        move_history=history,
    )
