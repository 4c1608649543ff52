"""FastAPI service exposing Ticky's move oracle and browser game sessions."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .ai import Difficulty, TickyBot, select_move
from .config import load_settings
from .game import EMPTY, TicTacToeGame, check_winner, is_full, winning_line

log = logging.getLogger("ticky.api")

BOT_PLAYER = "O"
HUMAN_PLAYER = "X"


class GameMode(str, Enum):
    PVP = "pvp"
    PVBOT = "pvbot"


@dataclass
class GameSession:
    """Container for an active game, its mode and Ticky's seat (if any)."""

    game: TicTacToeGame
    mode: GameMode
    difficulty: Difficulty
    bot: Optional[TickyBot] = None
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    bot_pending: bool = False
    # Bumped on every reset so a bot turn scheduled for an older board is dropped.
    generation: int = 0
    last_active: float = field(default_factory=lambda: time.time())
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Ticky", description="Tic-tac-toe against Ticky, the AI bot")

SESSION_TTL_SECONDS = 60 * 30  # 30 minutes idle

_settings = load_settings()
BOT_THINK_DELAY: Dict[Difficulty, float] = {
    Difficulty.PRO: _settings.pro_delay,
    Difficulty.FRIENDLY: _settings.friendly_delay,
}


# ---------- Request payloads ----------


def _normalize_board(cells: List[Optional[str]]) -> List[str]:
    out: List[str] = []
    for cell in cells:
        mark = (cell or "").strip()
        out.append(mark if mark else EMPTY)
    return out


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    mode: GameMode = GameMode.PVP
    difficulty: Difficulty = Difficulty.PRO


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


class SettingsRequest(BaseModel):
    """Switch game mode and/or Ticky's mood on an existing game."""

    mode: Optional[GameMode] = None
    difficulty: Optional[Difficulty] = None


class BoardRequest(BaseModel):
    board: List[Optional[str]] = Field(min_length=9, max_length=9)

    @field_validator("board")
    @classmethod
    def normalize_board(cls, value: List[Optional[str]]) -> List[str]:
        return _normalize_board(value)


class OracleMoveRequest(BoardRequest):
    """Board plus both marks; Ticky answers with the cell to play."""

    model_config = ConfigDict(populate_by_name=True)

    bot_mark: str = Field(default=BOT_PLAYER, alias="botMark", min_length=1)
    human_mark: str = Field(default=HUMAN_PLAYER, alias="humanMark", min_length=1)
    difficulty: Difficulty = Difficulty.PRO

    @model_validator(mode="after")
    def ensure_distinct_marks(self) -> "OracleMoveRequest":
        self.bot_mark = self.bot_mark.strip()
        self.human_mark = self.human_mark.strip()
        if not self.bot_mark or not self.human_mark:
            raise ValueError("Player marks must not be blank")
        if self.bot_mark == self.human_mark:
            raise ValueError("botMark and humanMark must differ")
        return self


# ---------- Sessions ----------


def _cleanup_sessions() -> None:
    """Remove sessions nobody has touched for SESSION_TTL_SECONDS."""

    now = time.time()
    expired = [
        game_id
        for game_id, session in list(SESSIONS.items())
        if not session.bot_pending
        and now - session.last_active >= SESSION_TTL_SECONDS
    ]
    for game_id in expired:
        SESSIONS.pop(game_id, None)
    if expired:
        log.info("dropped %d idle game(s)", len(expired))


def _make_bot(mode: GameMode, difficulty: Difficulty) -> Optional[TickyBot]:
    if mode is not GameMode.PVBOT:
        return None
    return TickyBot(player=BOT_PLAYER, opponent=HUMAN_PLAYER, difficulty=difficulty)


def _create_session(
    mode: GameMode, difficulty: Difficulty
) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    _cleanup_sessions()
    session = GameSession(
        game=TicTacToeGame(),
        mode=mode,
        difficulty=difficulty,
        bot=_make_bot(mode, difficulty),
    )
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    log.info(
        "game %s created (mode=%s, difficulty=%s)",
        session_id,
        mode.value,
        difficulty.value,
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        session = SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    session.last_active = time.time()
    return session


def _reset_session(session: GameSession) -> None:
    # Caller holds session.lock.
    session.game.reset()
    session.move_log.clear()
    session.bot_pending = False
    session.generation += 1


def _run_bot_turn(game_id: str, generation: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, BOT_THINK_DELAY.get(session.difficulty, 0.0)))

    with session.lock:
        if session.generation != generation:
            return
        try:
            bot = session.bot
            game = session.game
            if not bot or game.is_over or game.current_player != bot.player:
                return
            cell_index = bot.choose(game)
            if cell_index is None:
                return
            game.play_move(cell_index)
            session.move_log.append({"player": bot.player, "cellIndex": cell_index})
            log.debug("game %s: Ticky played %d", game_id, cell_index)
        finally:
            session.bot_pending = False


def _status(session: GameSession) -> str:
    game = session.game
    bot = session.bot
    if game.winner:
        if bot and game.winner == bot.player:
            return "Ticky Wins!"
        return f"Player {game.winner} Wins!"
    if game.drawn:
        return "It's a Draw!"
    if bot:
        if game.current_player != bot.player:
            return "Your Turn"
        return "Ticky is thinking..." if session.bot_pending else "Ticky's Turn"
    return f"Player {game.current_player}'s Turn"


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        line = game.winning_line()
        state: Dict[str, object] = {
            "id": game_id,
            "mode": session.mode.value,
            "difficulty": session.difficulty.value,
            "cells": [c if c != EMPTY else "" for c in game.cells],
            "currentPlayer": game.current_player,
            "winner": game.winner,
            "drawn": game.drawn,
            "winningLine": list(line) if line else None,
            "availableMoves": game.available_moves(),
            "moveLog": list(session.move_log),
            "botPending": session.bot_pending,
            "status": _status(session),
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_bot = False
    with session.lock:
        game = session.game
        bot = session.bot
        if game.is_over:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.bot_pending:
            raise HTTPException(status_code=400, detail="Ticky is completing its move")

        if bot and game.current_player == bot.player:
            raise HTTPException(status_code=400, detail="It is Ticky's turn")

        player = game.current_player
        try:
            game.play_move(cell_index)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": player, "cellIndex": cell_index})

        should_schedule_bot = bool(
            bot and not game.is_over and game.current_player == bot.player
        )
        if should_schedule_bot:
            session.bot_pending = True
        generation = session.generation

    if should_schedule_bot and background_tasks is not None:
        background_tasks.add_task(_run_bot_turn, game_id, generation)


# ---------- Game routes ----------


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode, request.difficulty)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        _reset_session(session)
    log.info("game %s reset", game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/settings")
def change_settings(game_id: str, request: SettingsRequest) -> Dict[str, object]:
    """Changing the mode always restarts; changing mood restarts only against Ticky."""

    session = _get_session(game_id)
    with session.lock:
        restart = False
        if request.mode is not None:
            session.mode = request.mode
            restart = True
        if request.difficulty is not None:
            session.difficulty = request.difficulty
            restart = restart or session.mode is GameMode.PVBOT
        session.bot = _make_bot(session.mode, session.difficulty)
        if restart:
            _reset_session(session)
    return _serialize_session(game_id, session)


# ---------- Stateless oracle ----------


@app.post("/api/evaluate")
def evaluate(request: BoardRequest) -> Dict[str, object]:
    cells = request.board
    winner = check_winner(cells)
    full = is_full(cells)
    line = winning_line(cells)
    return {
        "winner": winner,
        "full": full,
        "gameOver": winner is not None or full,
        "line": list(line) if line else None,
    }


@app.post("/api/move")
def oracle_move(request: OracleMoveRequest) -> Dict[str, Optional[int]]:
    move = select_move(
        request.board, request.bot_mark, request.human_mark, request.difficulty
    )
    return {"move": move}
