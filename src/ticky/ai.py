"""Move selection for Ticky: exhaustive alpha-beta for Pro, weighted rules for Friendly."""

from __future__ import annotations

import logging
import math
import random
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence

from .game import (
    CENTER,
    CORNERS,
    EMPTY,
    Player,
    TicTacToeGame,
    check_winner,
    empty_cells,
    is_full,
)

log = logging.getLogger("ticky.ai")

OPENING_MOVES = (0, 2, 4, 6, 8)  # centre or corners

# Friendly tier: a rule fires when rng.random() exceeds its threshold.
WIN_THRESHOLD = 0.3  # 70%
BLOCK_THRESHOLD = 0.4  # 60%
CENTER_THRESHOLD = 0.5  # 50%
CORNER_THRESHOLD = 0.6  # 40%

_DEFAULT_RNG = random.Random()


class Difficulty(str, Enum):
    FRIENDLY = "friendly"
    PRO = "pro"


# ---- public API ----


def evaluate_board(cells: Sequence[str]) -> Optional[Player]:
    """Return the mark that owns a completed line, or ``None``."""
    return check_winner(cells)


def select_move(
    cells: Sequence[str],
    bot: Player,
    human: Player,
    difficulty: Difficulty = Difficulty.PRO,
    rng: Optional[random.Random] = None,
) -> Optional[int]:
    """Pick the cell Ticky plays next.

    Returns ``None`` when the board has no empty cell left. On an empty board
    both tiers open on a random centre or corner cell.
    """
    rng = rng if rng is not None else _DEFAULT_RNG
    moves = empty_cells(cells)
    if not moves:
        return None

    if len(moves) == len(cells):
        return rng.choice(OPENING_MOVES)

    if Difficulty(difficulty) is Difficulty.FRIENDLY:
        return friendly_move(cells, bot, human, rng)
    return pro_move(cells, bot, human)


def find_winning_move(cells: Sequence[str], player: Player) -> Optional[int]:
    """Lowest empty cell that completes a line for ``player``."""
    for idx in empty_cells(cells):
        trial = list(cells)
        trial[idx] = player
        if check_winner(trial) == player:
            return idx
    return None


def friendly_move(
    cells: Sequence[str],
    bot: Player,
    human: Player,
    rng: Optional[random.Random] = None,
) -> Optional[int]:
    rng = rng if rng is not None else _DEFAULT_RNG
    if not empty_cells(cells):
        return None

    # 1) Win if possible
    if rng.random() > WIN_THRESHOLD:
        win = find_winning_move(cells, bot)
        if win is not None:
            return win

    # 2) Block the opponent
    if rng.random() > BLOCK_THRESHOLD:
        block = find_winning_move(cells, human)
        if block is not None:
            return block

    # 3) Centre
    if cells[CENTER] == EMPTY and rng.random() > CENTER_THRESHOLD:
        return CENTER

    # 4) Corner
    corners = [idx for idx in CORNERS if cells[idx] == EMPTY]
    if corners and rng.random() > CORNER_THRESHOLD:
        return rng.choice(corners)

    # 5) Anything
    return rng.choice(empty_cells(cells))


def pro_move(cells: Sequence[str], bot: Player, human: Player) -> Optional[int]:
    """Best move by full-depth minimax; ties go to the lowest index."""
    board = list(cells)
    moves = empty_cells(board)
    if not moves:
        return None
    best_score = -math.inf
    best_move = moves[0]

    for idx in moves:
        with _placed(board, idx, bot):
            score = _minimax(board, 0, False, -math.inf, math.inf, bot, human)
        if score > best_score:
            best_score, best_move = score, idx

    log.debug("pro move %d for %s (score %s)", best_move, bot, best_score)
    return best_move


# ---- core search ----


@contextmanager
def _placed(board: List[str], idx: int, player: Player) -> Iterator[None]:
    board[idx] = player
    try:
        yield
    finally:
        board[idx] = EMPTY


def _minimax(
    board: List[str],
    depth: int,
    maximizing: bool,
    alpha: float,
    beta: float,
    bot: Player,
    human: Player,
) -> float:
    winner = check_winner(board)
    if winner == bot:
        return 10 - depth  # faster wins score higher
    if winner == human:
        return depth - 10  # slower losses score higher
    if is_full(board):
        return 0

    if maximizing:
        value = -math.inf
        for idx in empty_cells(board):
            with _placed(board, idx, bot):
                score = _minimax(board, depth + 1, False, alpha, beta, bot, human)
            value = max(value, score)
            alpha = max(alpha, score)
            if beta <= alpha:
                break
        return value

    value = math.inf
    for idx in empty_cells(board):
        with _placed(board, idx, human):
            score = _minimax(board, depth + 1, True, alpha, beta, bot, human)
        value = min(value, score)
        beta = min(beta, score)
        if beta <= alpha:
            break
    return value


# ---- player ----


@dataclass
class TickyBot:
    """Ticky as a seat at a :class:`TicTacToeGame`.

    The bot is stateless apart from its settings; every call to
    :meth:`choose` searches the game's current board from scratch.
    """

    player: Player = "O"
    opponent: Player = "X"
    difficulty: Difficulty = Difficulty.PRO
    rng: Optional[random.Random] = field(default=None, repr=False)

    def choose(self, game: TicTacToeGame) -> Optional[int]:
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")

        move = select_move(
            game.cells, self.player, self.opponent, self.difficulty, self.rng
        )
        log.debug(
            "Ticky (%s, %s) picked %s",
            self.player,
            Difficulty(self.difficulty).value,
            move,
        )
        return move
