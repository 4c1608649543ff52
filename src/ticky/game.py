"""Core rules for Ticky's tic-tac-toe board."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O" in the web game, any non-empty mark in the core
Line = Tuple[int, int, int]

EMPTY = " "
CENTER = 4
CORNERS: Tuple[int, ...] = (0, 2, 6, 8)

WINNING_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


# ---------- Board predicates ----------


def winning_line(cells: Sequence[str]) -> Optional[Line]:
    """Return the first completed line on the board, if any."""
    for line in WINNING_LINES:
        a, b, c = line
        v = cells[a]
        if v != EMPTY and v == cells[b] == cells[c]:
            return line
    return None


def check_winner(cells: Sequence[str]) -> Optional[Player]:
    line = winning_line(cells)
    if line is None:
        return None
    return cells[line[0]]


def is_full(cells: Sequence[str]) -> bool:
    return all(c != EMPTY for c in cells)


def is_game_over(cells: Sequence[str]) -> bool:
    return check_winner(cells) is not None or is_full(cells)


def empty_cells(cells: Sequence[str]) -> List[int]:
    return [i for i, c in enumerate(cells) if c == EMPTY]


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    cells: List[str] = field(default_factory=lambda: [EMPTY] * 9)
    current_player: Player = "X"
    winner: Optional[Player] = None
    drawn: bool = False

    @property
    def is_over(self) -> bool:
        return self.winner is not None or self.drawn

    def available_moves(self) -> List[int]:
        if self.is_over:
            return []
        return empty_cells(self.cells)

    def play_move(self, index: int) -> None:
        """Place the current player's mark, update the result and pass the turn."""
        if self.is_over:
            raise ValueError("Game already finished")
        if not 0 <= index < len(self.cells):
            raise ValueError(f"Cell index {index} is out of range")
        if self.cells[index] != EMPTY:
            raise ValueError("Cell already occupied")

        self.cells[index] = self.current_player
        self._update_state()
        self.current_player = "O" if self.current_player == "X" else "X"

    def winning_line(self) -> Optional[Line]:
        return winning_line(self.cells)

    def reset(self) -> None:
        self.cells = [EMPTY] * 9
        self.current_player = "X"
        self.winner = None
        self.drawn = False

    def clone(self) -> "TicTacToeGame":
        return TicTacToeGame(
            cells=self.cells.copy(),
            current_player=self.current_player,
            winner=self.winner,
            drawn=self.drawn,
        )

    # ---- helpers ----

    def _update_state(self) -> None:
        self.winner = check_winner(self.cells)
        self.drawn = self.winner is None and is_full(self.cells)
