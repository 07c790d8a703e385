from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from .board import Cell, neighbors
from .game_engine import PLAYING, Game, InvalidGameStatus, reveal, toggle_flag

logger = logging.getLogger(__name__)

# Simple deterministic rules, checked against each numbered neighbor of a hidden cell:
# - If a number equals its hidden + flagged neighbors, they are all mines -> flag
# - If a number is already covered by its flagged neighbors, the rest are safe -> reveal


class Action(NamedTuple):
    kind: str
    cell: Cell


def _must_be_mine(game: Game, number: Cell) -> bool:
    unknown = sum(
        1 for n in neighbors(number, game.board)
        if game.board[n].is_hidden or game.board[n].is_flagged
    )
    return game.board[number].adjacent == unknown


def _quota_met(game: Game, number: Cell) -> bool:
    flagged = sum(1 for n in neighbors(number, game.board) if game.board[n].is_flagged)
    return game.board[number].adjacent <= flagged


def next_step(game: Game) -> Optional[Action]:
    if game.status != PLAYING:
        raise InvalidGameStatus(f"game is {game.status}")
    for cell, state in game.board.items():
        if not state.is_hidden:
            continue
        numbers = [n for n in neighbors(cell, game.board) if game.board[n].is_revealed]
        if any(_must_be_mine(game, n) for n in numbers):
            return Action("flag", cell)
        if any(_quota_met(game, n) for n in numbers):
            return Action("reveal", cell)
    return None


def take_step(game: Game) -> Game:
    action = next_step(game)
    if action is None:
        return game
    if action.kind == "flag":
        return toggle_flag(game, action.cell)
    return reveal(game, action.cell)


def auto_play(game: Game, max_steps: Optional[int] = None) -> Game:
    """Keep taking solver steps until the game ends or no move is forced."""
    steps = 0
    while game.status == PLAYING and (max_steps is None or steps < max_steps):
        nxt = take_step(game)
        if nxt is game:
            break
        game = nxt
        steps += 1
    logger.debug("auto_play took %d steps, status=%s", steps, game.status)
    return game
