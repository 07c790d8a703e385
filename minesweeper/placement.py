from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Callable, Dict, FrozenSet, NamedTuple

from .board import Cell, neighbors

if TYPE_CHECKING:
    from .game_engine import Game

logger = logging.getLogger(__name__)


class PlacementStrategy(NamedTuple):
    name: str
    place: Callable[["Game", Cell, random.Random], FrozenSet[Cell]]
    min_mines: int = 0


def _place_standard(game: "Game", first: Cell, rng: random.Random) -> FrozenSet[Cell]:
    # The first cell and its neighbors stay clear, so the opening reveal is a 0.
    excluded = neighbors(first, game.board) | {first}
    available = [c for c in game.board if c not in excluded]
    if game.mine_count > len(available):
        raise ValueError("insufficient_space_for_mines")
    rng.shuffle(available)
    return frozenset(available[: game.mine_count])


def _place_impossible(game: "Game", first: Cell, rng: random.Random) -> FrozenSet[Cell]:
    available = [c for c in game.board if c != first]
    if game.mine_count < 1 or game.mine_count - 1 > len(available):
        raise ValueError("insufficient_space_for_mines")
    return frozenset(rng.sample(available, game.mine_count - 1)) | {first}


STANDARD = PlacementStrategy("Standard", _place_standard)
IMPOSSIBLE = PlacementStrategy("Impossible", _place_impossible, min_mines=1)

STRATEGIES: Dict[str, PlacementStrategy] = {
    "standard": STANDARD,
    "impossible": IMPOSSIBLE,
}


def get_strategy(name: str) -> PlacementStrategy:
    try:
        return STRATEGIES[name.lower()]
    except KeyError:
        raise ValueError("unknown_strategy") from None


def place_mines(game: "Game", first: Cell, rng: random.Random) -> FrozenSet[Cell]:
    """Run the game's strategy for a first reveal at ``first``.

    Raises ``ValueError("insufficient_space_for_mines")`` when the board cannot
    hold ``game.mine_count`` mines outside the strategy's exclusion zone; that
    is a configuration mistake rather than something to recover from.
    """
    mines = game.strategy.place(game, first, rng)
    logger.debug(
        "placed %d mines with strategy=%s first=%s", len(mines), game.strategy.name, first
    )
    return mines
