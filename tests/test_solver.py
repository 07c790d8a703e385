from dataclasses import replace

import pytest
from minesweeper.board import Cell, FLAGGED, HIDDEN, revealed
from minesweeper.game_engine import InvalidGameStatus, generate_new_game, reveal, toggle_flag
from minesweeper.solver import Action, auto_play, next_step, take_step


def with_mines(rows, cols, mines):
    s = generate_new_game(rows, cols, len(mines))
    return replace(s, mines=frozenset(Cell(r, c) for r, c in mines))


def opened_wall():
    return reveal(with_mines(3, 5, [(0, 2), (1, 2), (2, 2)]), (1, 0))


def flagged_corner():
    # 2x3 board, the corner mine already flagged next to a revealed 1
    s = reveal(with_mines(2, 3, [(0, 0)]), (1, 1))
    return toggle_flag(s, (0, 0))


def test_forced_mine_is_flagged():
    s = opened_wall()
    action = next_step(s)
    assert action.kind == "flag"
    assert action.cell in s.mines
    s2 = take_step(s)
    assert s2.board[action.cell] == FLAGGED


def test_satisfied_number_reveals_neighbor():
    s = flagged_corner()
    action = next_step(s)
    assert action.kind == "reveal"
    assert action.cell not in s.mines
    s2 = take_step(s)
    assert s2.board[action.cell].is_revealed


def test_no_forced_move():
    s = generate_new_game(5, 5, 3)
    assert next_step(s) is None
    assert take_step(s) is s


def test_auto_play_wins_when_everything_is_forced():
    s = auto_play(flagged_corner())
    assert s.status == "won"
    assert s.board[Cell(0, 0)] == FLAGGED
    assert s.board[Cell(1, 0)] == revealed(1)


def test_auto_play_stalls_without_guessing():
    s = auto_play(opened_wall())
    assert s.status == "playing"
    assert {c for c, v in s.board.items() if v == FLAGGED} == s.mines
    assert all(s.board[Cell(r, c)] == HIDDEN for r in range(3) for c in (3, 4))
    assert next_step(s) is None


def test_auto_play_respects_max_steps():
    s = auto_play(opened_wall(), max_steps=1)
    assert sum(1 for v in s.board.values() if v == FLAGGED) == 1


def test_auto_play_never_loses_on_standard_boards():
    for seed in range(5):
        s = reveal(generate_new_game(9, 9, 10, rng_seed=seed), (4, 4))
        s = auto_play(s)
        assert s.status in ("playing", "won")


def test_next_step_requires_playing_game():
    s = reveal(with_mines(2, 2, [(0, 0)]), (0, 0))
    with pytest.raises(InvalidGameStatus):
        next_step(s)


def test_action_is_plain_value():
    assert Action("flag", Cell(1, 2)) == ("flag", (1, 2))
