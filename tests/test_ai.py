"""Tests for Ticky's move selection."""

import random

import pytest

from ticky.ai import (
    OPENING_MOVES,
    Difficulty,
    TickyBot,
    evaluate_board,
    find_winning_move,
    friendly_move,
    pro_move,
    select_move,
)
from ticky.game import EMPTY, TicTacToeGame, empty_cells, is_game_over


def board(text):
    return [EMPTY if c == "." else c for c in text]


class ScriptedRng:
    """Stand-in random source: replays fixed coin values, always picks the first option."""

    def __init__(self, *values):
        self.values = list(values)
        self.choices = []

    def random(self):
        return self.values.pop(0)

    def choice(self, seq):
        self.choices.append(list(seq))
        return seq[0]


# ---- win detector ----


def test_evaluate_board_reports_winner():
    assert evaluate_board(board("X...X...X")) == "X"
    assert evaluate_board(board("..O.O.O..")) == "O"
    assert evaluate_board(board("XO.......")) is None


def test_full_board_has_no_move():
    drawn = board("XOXXOOOXX")
    assert evaluate_board(drawn) is None
    assert select_move(drawn, "O", "X", Difficulty.PRO) is None
    assert select_move(drawn, "O", "X", Difficulty.FRIENDLY) is None


def test_find_winning_move():
    assert find_winning_move(board("OO.XX...."), "O") == 2
    assert find_winning_move(board("OO.XX...."), "X") == 5
    assert find_winning_move(board("X........"), "X") is None


# ---- pro tier ----


def test_pro_blocks_opponent_line():
    assert select_move(board("XX..O...."), "O", "X", Difficulty.PRO) == 2


def test_pro_prefers_own_win_over_block():
    # Completing 3-4-5 now scores 10; blocking at 2 can only win later.
    assert select_move(board("OO.XX...."), "X", "O", Difficulty.PRO) == 5


def test_pro_takes_last_cell():
    cells = board("XOXXOOO.X")
    assert evaluate_board(cells) is None
    assert select_move(cells, "X", "O", Difficulty.PRO) == 7


def test_pro_is_deterministic():
    cells = board("X...O....")
    moves = {
        select_move(cells, "X", "O", Difficulty.PRO, random.Random(seed))
        for seed in range(10)
    }
    assert len(moves) == 1


def test_pro_does_not_mutate_callers_board():
    cells = board("X...O...X")
    snapshot = list(cells)
    pro_move(cells, "O", "X")
    assert cells == snapshot


def test_pro_marks_are_opaque_symbols():
    cells = ["a", "a", EMPTY, EMPTY, "b", EMPTY, EMPTY, EMPTY, EMPTY]
    assert pro_move(cells, "b", "a") == 2


def test_opening_is_center_or_corner():
    rng = random.Random(1234)
    empty = [EMPTY] * 9
    seen = {select_move(empty, "X", "O", Difficulty.PRO, rng) for _ in range(200)}
    assert seen == set(OPENING_MOVES)
    seen = {
        select_move(empty, "X", "O", Difficulty.FRIENDLY, rng) for _ in range(200)
    }
    assert seen == set(OPENING_MOVES)


def _assert_never_loses(game, bot):
    if game.is_over:
        assert game.winner != bot.opponent, game.cells
        return
    if game.current_player == bot.player:
        replies = [bot.choose(game)]
    else:
        replies = game.available_moves()
    for move in replies:
        child = game.clone()
        child.play_move(move)
        _assert_never_loses(child, bot)


@pytest.mark.parametrize("opening", OPENING_MOVES)
def test_pro_never_loses_moving_first(opening):
    bot = TickyBot(player="X", opponent="O", difficulty=Difficulty.PRO)
    game = TicTacToeGame()
    game.play_move(opening)
    _assert_never_loses(game, bot)


def test_pro_never_loses_moving_second():
    bot = TickyBot(player="O", opponent="X", difficulty=Difficulty.PRO)
    _assert_never_loses(TicTacToeGame(), bot)


def test_pro_self_play_is_a_draw():
    rng = random.Random(5)
    for _ in range(5):
        game = TicTacToeGame()
        bots = {
            "X": TickyBot(player="X", opponent="O", rng=rng),
            "O": TickyBot(player="O", opponent="X", rng=rng),
        }
        while not game.is_over:
            game.play_move(bots[game.current_player].choose(game))
        assert game.drawn


# ---- friendly tier ----


# O to move: O wins at 2, X threatens 5.
THREATS = board("OO.XX...X")


def test_friendly_takes_win_when_first_coin_lands():
    rng = ScriptedRng(0.9)
    assert friendly_move(THREATS, "O", "X", rng) == 2
    assert rng.values == []


def test_friendly_blocks_when_win_coin_fails():
    rng = ScriptedRng(0.3, 0.41)
    assert friendly_move(THREATS, "O", "X", rng) == 5


def test_friendly_can_skip_both_win_and_block():
    # Centre is taken, so no centre coin is drawn; corner coin fails too.
    rng = ScriptedRng(0.1, 0.2, 0.6)
    assert friendly_move(THREATS, "O", "X", rng) == 2
    assert rng.choices == [[2, 5, 6, 7]]


def test_friendly_corner_pick():
    rng = ScriptedRng(0.1, 0.2, 0.61)
    assert friendly_move(THREATS, "O", "X", rng) == 2
    assert rng.choices == [[2, 6]]


def test_friendly_takes_center():
    rng = ScriptedRng(0.9, 0.9, 0.51)
    assert friendly_move(board("X........"), "O", "X", rng) == 4
    assert rng.values == []


def test_friendly_skips_center_on_failed_coin():
    rng = ScriptedRng(0.9, 0.9, 0.5, 0.7)
    assert friendly_move(board("X........"), "O", "X", rng) == 2
    assert rng.choices == [[2, 6, 8]]


def test_friendly_falls_back_to_any_empty_cell():
    # Centre and every corner taken: no centre or corner coin is drawn.
    cells = board("X.O.X.O.O")
    rng = ScriptedRng(0.0, 0.0)
    assert friendly_move(cells, "X", "O", rng) == 1
    assert rng.choices == [[1, 3, 5, 7]]


def _random_open_board(rng):
    while True:
        cells = [EMPTY] * 9
        mark = "X"
        for _ in range(rng.randint(1, 7)):
            cells[rng.choice(empty_cells(cells))] = mark
            mark = "O" if mark == "X" else "X"
        if not is_game_over(cells):
            return cells, mark


def test_friendly_always_returns_an_empty_cell():
    rng = random.Random(99)
    for _ in range(300):
        cells, to_move = _random_open_board(rng)
        other = "O" if to_move == "X" else "X"
        move = select_move(cells, to_move, other, Difficulty.FRIENDLY, rng)
        assert move in empty_cells(cells)


def test_friendly_seeded_rng_is_reproducible():
    cells = board("X...O....")

    def pick(cells, rng):
        return select_move(cells, "X", "O", "friendly", rng)

    first = [pick(cells, random.Random(s)) for s in range(20)]
    second = [pick(cells, random.Random(s)) for s in range(20)]
    assert first == second


# ---- bot player ----


def test_bot_refuses_to_move_out_of_turn():
    bot = TickyBot(player="O", opponent="X")
    with pytest.raises(ValueError):
        bot.choose(TicTacToeGame())


def test_bot_takes_immediate_win():
    game = TicTacToeGame(cells=board("OO.XX...X"), current_player="O")
    bot = TickyBot(player="O", opponent="X", difficulty=Difficulty.PRO)
    assert bot.choose(game) == 2


def test_tier_moves_on_full_board_return_none():
    drawn = board("XOXXOOOXX")
    assert pro_move(drawn, "O", "X") is None
    assert friendly_move(drawn, "O", "X", ScriptedRng()) is None
