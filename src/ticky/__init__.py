"""Ticky package exposing tic-tac-toe rules, the move oracle, and the web application."""

from .ai import Difficulty, TickyBot, evaluate_board, select_move
from .api import app
from .game import TicTacToeGame, check_winner, is_full

__all__ = [
    "Difficulty",
    "TicTacToeGame",
    "TickyBot",
    "app",
    "check_winner",
    "evaluate_board",
    "is_full",
    "select_move",
]
