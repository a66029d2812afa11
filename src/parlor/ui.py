"""FastAPI service hosting in-memory Dots & Boxes, Hex and Mastermind games."""

from __future__ import annotations

import logging
import random
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import dots, hexgame, mastermind
from .ai import GreedyDotsAI
from .engine import Event
from .errors import IllegalMove, InvalidConfiguration
from .scheduler import DeferredMove

logger = logging.getLogger(__name__)

DOTS, HEX, MASTERMIND = "dots", "hex", "mastermind"
ENGINES = {DOTS: dots, HEX: hexgame, MASTERMIND: mastermind}


@dataclass
class GameSession:
    """Container for one running game, its optional computer opponent and timer."""

    kind: str
    state: Any
    ai: Optional[GreedyDotsAI] = None
    move_log: List[Dict[str, Any]] = field(default_factory=list)
    ai_pending: bool = False
    ai_timer: Optional[DeferredMove] = field(default=None, repr=False)
    # bumped on every reset so timers planned before it can never match again
    generation: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Parlor", description="Turn-based board game engines served as JSON")


AI_THINK_DELAY: float = 0.55
AI_CHAIN_DELAY: float = 0.40


# ---------- Request models ----------


class NewDotsRequest(BaseModel):
    """Request payload for a Dots & Boxes game."""

    rows: int = Field(default=6, ge=dots.MIN_SIDE, le=dots.MAX_SIDE)
    cols: int = Field(default=6, ge=dots.MIN_SIDE, le=dots.MAX_SIDE)
    players: int = Field(default=2, description="Number of seats, 2 to 4")
    opponent: bool = Field(default=False, description="Computer plays as player 2")
    difficulty: Optional[str] = Field(default=None, description="Preset board size")
    seed: Optional[int] = Field(default=None, description="Seed for the computer opponent")

    @field_validator("players")
    @classmethod
    def ensure_supported_players(cls, value: int) -> int:
        if value not in dots.PLAYER_COUNTS:
            raise ValueError(
                f"Unsupported player count {value}. "
                f"Choose one of {', '.join(map(str, dots.PLAYER_COUNTS))}."
            )
        return value

    @field_validator("difficulty")
    @classmethod
    def ensure_known_difficulty(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in dots.DIFFICULTIES:
            raise ValueError(
                f"Unknown difficulty {value!r}. "
                f"Choose one of {', '.join(dots.DIFFICULTIES)}."
            )
        return value

    @model_validator(mode="after")
    def ensure_valid_config(self) -> "NewDotsRequest":
        self.to_config()
        return self

    def to_config(self) -> dots.DotsConfig:
        if self.difficulty:
            return dots.DotsConfig.preset(self.difficulty, self.players, self.opponent)
        return dots.DotsConfig(
            rows=self.rows, cols=self.cols, players=self.players, opponent=self.opponent
        )


class NewHexRequest(BaseModel):
    size: int = Field(default=11, ge=hexgame.MIN_SIZE, le=hexgame.MAX_SIZE)


class NewMastermindRequest(BaseModel):
    """Request payload for a Mastermind game."""

    model_config = ConfigDict(populate_by_name=True)

    palette_size: int = Field(default=6, alias="paletteSize")
    code_length: int = Field(default=4, alias="codeLength")
    max_attempts: int = Field(default=10, alias="maxAttempts")
    difficulty: Optional[str] = None

    @field_validator("difficulty")
    @classmethod
    def ensure_known_difficulty(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in mastermind.DIFFICULTIES:
            raise ValueError(
                f"Unknown difficulty {value!r}. "
                f"Choose one of {', '.join(mastermind.DIFFICULTIES)}."
            )
        return value

    @model_validator(mode="after")
    def ensure_valid_config(self) -> "NewMastermindRequest":
        self.to_config()
        return self

    def to_config(self) -> mastermind.MastermindConfig:
        if self.difficulty:
            return mastermind.MastermindConfig.preset(self.difficulty)
        return mastermind.MastermindConfig(
            palette_size=self.palette_size,
            code_length=self.code_length,
            max_attempts=self.max_attempts,
        )


class MoveRequest(BaseModel):
    """Move payload; which fields are needed depends on the game."""

    orientation: Optional[str] = Field(default=None, pattern="^[hv]$")
    row: Optional[int] = Field(default=None, ge=0)
    col: Optional[int] = Field(default=None, ge=0)
    guess: Optional[List[str]] = None
    version: Optional[int] = Field(
        default=None, ge=0, description="State version the move was made against"
    )


class ResetRequest(BaseModel):
    """Optional reset payload; a difficulty switches the preset for the next round."""

    difficulty: Optional[str] = None


# ---------- Sessions ----------


def _register(kind: str, state: Any, ai: Optional[GreedyDotsAI] = None) -> Tuple[str, GameSession]:
    session = GameSession(kind=kind, state=state, ai=ai)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created %s game %s", kind, session_id)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _move_for(kind: str, request: MoveRequest) -> Any:
    if kind == DOTS:
        if request.orientation is None or request.row is None or request.col is None:
            raise HTTPException(
                status_code=422, detail="Dots & Boxes moves need orientation, row and col"
            )
        return dots.Edge(request.orientation, request.row, request.col)
    if kind == HEX:
        if request.row is None or request.col is None:
            raise HTTPException(status_code=422, detail="Hex moves need row and col")
        return hexgame.Cell(request.row, request.col)
    if request.guess is None:
        raise HTTPException(status_code=422, detail="Mastermind moves need a guess")
    return tuple(request.guess)


def _human_seat(session: GameSession) -> Optional[int]:
    """Seat the browser may move for; None when every seat is human."""

    if session.ai is None:
        return None
    return 3 - session.ai.player


def _log_entry(kind: str, player: Optional[int], move: Any) -> Dict[str, Any]:
    if kind == DOTS:
        return {"player": player, "orientation": move.orientation, "row": move.row, "col": move.col}
    if kind == HEX:
        return {"player": player, "row": move.row, "col": move.col}
    return {"guess": list(move)}


def _schedule_ai(game_id: str, session: GameSession, delay: float) -> bool:
    """Arm the computer's next move. Caller holds ``session.lock``."""

    state = session.state
    if session.ai is None or not state.computer_to_move:
        return False
    token = (session.generation, state.version)
    session.ai_pending = True
    session.ai_timer = DeferredMove(delay, _run_ai_turn, game_id, token).start()
    return True


def _cancel_ai(session: GameSession) -> None:
    if session.ai_timer is not None:
        session.ai_timer.cancel()
        session.ai_timer = None
    session.ai_pending = False


def _run_ai_turn(game_id: str, token: Tuple[int, int]) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    with session.lock:
        # The game was reset, or moved on, after this move was planned
        if (session.generation, session.state.version) != token:
            logger.info("Dropping stale AI move for game %s", game_id)
            return
        session.ai_pending = False
        session.ai_timer = None
        if session.ai is None or not session.state.computer_to_move:
            return
        try:
            edge = session.ai.choose(session.state)
            result = dots.apply_move(session.state, edge, player=session.ai.player)
        except IllegalMove as exc:
            logger.warning("AI move rejected in game %s: %s", game_id, exc)
            return
        session.state = result.state
        session.move_log.append(_log_entry(DOTS, session.ai.player, edge))
        logger.debug("AI drew %s in game %s", edge, game_id)
        # A capture keeps the turn, so the computer goes again
        _schedule_ai(game_id, session, AI_CHAIN_DELAY)


def _apply_player_move(game_id: str, session: GameSession, request: MoveRequest) -> List[Event]:
    with session.lock:
        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")
        if request.version is not None and request.version != session.state.version:
            raise HTTPException(
                status_code=409,
                detail=(
                    f"Move was made against version {request.version}, "
                    f"game is at version {session.state.version}"
                ),
            )

        move = _move_for(session.kind, request)
        engine = ENGINES[session.kind]
        player = getattr(session.state, "current", None)
        try:
            result = engine.apply_move(session.state, move, player=_human_seat(session))
        except IllegalMove as exc:
            logger.debug("Rejected move %s in game %s: %s", move, game_id, exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.state = result.state
        session.move_log.append(_log_entry(session.kind, player, move))
        _schedule_ai(game_id, session, AI_THINK_DELAY)
        return result.events


def _fresh_state(session: GameSession, difficulty: Optional[str] = None) -> Any:
    state = session.state
    if session.kind == HEX:
        if difficulty is not None:
            raise InvalidConfiguration("Hex games have no difficulty presets")
        return hexgame.new_game(state.config)
    if session.kind == DOTS:
        config = state.config
        if difficulty is not None:
            config = dots.DotsConfig.preset(difficulty, config.players, config.opponent)
        return dots.new_game(config)
    config = mastermind.MastermindConfig.preset(difficulty) if difficulty is not None else None
    return mastermind.reset(state, config=config)


# ---------- Serialization ----------


def _serialize_dots(game: dots.DotsGame) -> Dict[str, Any]:
    return {
        "rows": game.config.rows,
        "cols": game.config.cols,
        "players": game.config.players,
        "opponent": game.config.opponent,
        "currentPlayer": game.current,
        "horizontal": [list(line) for line in game.board.horizontal],
        "vertical": [list(line) for line in game.board.vertical],
        "boxes": [list(line) for line in game.board.boxes],
        "scores": list(game.scores),
        "gameOver": game.game_over,
        "winners": game.winners,
        "availableMoves": [
            {"orientation": e.orientation, "row": e.row, "col": e.col}
            for e in dots.legal_moves(game)
        ],
    }


def _serialize_hex(game: hexgame.HexGame) -> Dict[str, Any]:
    last = game.last_move
    return {
        "size": game.config.size,
        "cells": [list(line) for line in game.board.cells],
        "currentPlayer": game.current,
        "winner": game.winner or None,
        "gameOver": game.game_over,
        "lastCell": {"row": last.row, "col": last.col} if last else None,
    }


def _serialize_mastermind(game: mastermind.MastermindGame) -> Dict[str, Any]:
    return {
        "colors": list(game.config.colors),
        "codeLength": game.config.code_length,
        "maxAttempts": game.config.max_attempts,
        "guesses": [
            {"guess": list(r.guess), "exact": r.feedback.exact, "partial": r.feedback.partial}
            for r in game.guesses
        ],
        "attempts": game.attempts,
        "attemptsLeft": game.attempts_left,
        "won": game.won,
        "gameOver": game.game_over,
        "wins": game.wins,
        # never leak the code while the game is live
        "secret": list(game.secret) if game.game_over else None,
    }


SERIALIZERS = {DOTS: _serialize_dots, HEX: _serialize_hex, MASTERMIND: _serialize_mastermind}


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, Any]:
    with session.lock:
        state: Dict[str, Any] = {
            "id": game_id,
            "kind": session.kind,
            "version": session.state.version,
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        state.update(SERIALIZERS[session.kind](session.state))
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


# ---------- Routes ----------


@app.get("/")
def index() -> Dict[str, Any]:
    return {
        "games": {
            DOTS: {"difficulties": {k: list(v) for k, v in dots.DIFFICULTIES.items()}},
            HEX: {"sizes": [hexgame.MIN_SIZE, hexgame.MAX_SIZE]},
            MASTERMIND: {
                "difficulties": dict(mastermind.DIFFICULTIES),
                "palette": list(mastermind.PALETTE),
            },
        }
    }


@app.post("/api/dots")
def create_dots(request: NewDotsRequest) -> Dict[str, Any]:
    config = request.to_config()
    ai = None
    if config.opponent:
        ai = GreedyDotsAI(rng=random.Random(request.seed))
    game_id, session = _register(DOTS, dots.new_game(config), ai)
    return _serialize_session(game_id, session)


@app.post("/api/hex")
def create_hex(request: NewHexRequest) -> Dict[str, Any]:
    game_id, session = _register(HEX, hexgame.new_game(hexgame.HexConfig(size=request.size)))
    return _serialize_session(game_id, session)


@app.post("/api/mastermind")
def create_mastermind(request: NewMastermindRequest) -> Dict[str, Any]:
    game_id, session = _register(MASTERMIND, mastermind.new_game(request.to_config()))
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, Any]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(game_id: str, request: MoveRequest) -> Dict[str, Any]:
    session = _get_session(game_id)
    events = _apply_player_move(game_id, session, request)
    payload = _serialize_session(game_id, session)
    payload["events"] = events
    return payload


@app.post("/api/game/{game_id}/legal")
def check_move(game_id: str, request: MoveRequest) -> Dict[str, bool]:
    session = _get_session(game_id)
    move = _move_for(session.kind, request)
    with session.lock:
        if session.ai_pending:
            return {"legal": False}
        legal = ENGINES[session.kind].is_legal_move(
            session.state, move, player=_human_seat(session)
        )
    return {"legal": legal}


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str, request: Optional[ResetRequest] = None) -> Dict[str, Any]:
    session = _get_session(game_id)
    difficulty = request.difficulty if request else None
    with session.lock:
        try:
            fresh = _fresh_state(session, difficulty)
        except InvalidConfiguration as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        _cancel_ai(session)
        session.generation += 1
        session.state = fresh
        session.move_log = []
    logger.info("Reset %s game %s", session.kind, game_id)
    return _serialize_session(game_id, session)


@app.delete("/api/game/{game_id}")
def delete_game(game_id: str) -> Dict[str, str]:
    session = _get_session(game_id)
    with session.lock:
        _cancel_ai(session)
    SESSIONS.pop(game_id, None)
    logger.info("Closed %s game %s", session.kind, game_id)
    return {"id": game_id, "status": "closed"}
