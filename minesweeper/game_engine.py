from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Tuple, Union
import random

from .board import (
    Board,
    Cell,
    CellState,
    EXPLODED,
    FLAGGED,
    HIDDEN,
    adjacent_mine_count,
    neighbors,
    new_board,
    revealed,
)
from .placement import STANDARD, PlacementStrategy, place_mines

PLAYING = "playing"
WON = "won"
LOST = "lost"


class InvalidCellState(ValueError):
    """The targeted cell's state does not allow the requested action."""


class InvalidGameStatus(ValueError):
    """The game is no longer being played."""


class Difficulty(NamedTuple):
    name: str
    rows: int
    cols: int
    mine_count: int


TRIVIAL = Difficulty("Trivial", 9, 9, 5)
BEGINNER = Difficulty("Beginner", 9, 9, 10)
INTERMEDIATE = Difficulty("Intermediate", 16, 16, 40)
EXPERT = Difficulty("Expert", 16, 30, 99)

DIFFICULTIES: Dict[str, Difficulty] = {
    d.name.lower(): d for d in (TRIVIAL, BEGINNER, INTERMEDIATE, EXPERT)
}


@dataclass(frozen=True)
class Game:
    rows: int
    cols: int
    mine_count: int
    board: Board
    mines: FrozenSet[Cell] = frozenset()
    status: str = PLAYING
    strategy: PlacementStrategy = STANDARD
    rng_seed: Optional[int] = field(default=None, compare=False)

    @property
    def mines_placed(self) -> bool:
        return len(self.mines) == self.mine_count


def generate_new_game(
    rows: int,
    cols: int,
    mine_count: int,
    strategy: Optional[PlacementStrategy] = None,
    rng_seed: Optional[int] = None,
) -> Game:
    if rows <= 0 or cols <= 0:
        raise ValueError("invalid board size")
    strategy = strategy or STANDARD
    if mine_count < strategy.min_mines or mine_count > rows * cols:
        raise ValueError("invalid mine count")
    return Game(
        rows=rows,
        cols=cols,
        mine_count=mine_count,
        board=new_board(rows, cols),
        strategy=strategy,
        rng_seed=rng_seed,
    )


def generate_preset_game(
    difficulty: Union[Difficulty, str],
    strategy: Optional[PlacementStrategy] = None,
    rng_seed: Optional[int] = None,
) -> Game:
    if isinstance(difficulty, str):
        try:
            difficulty = DIFFICULTIES[difficulty.lower()]
        except KeyError:
            raise ValueError("unknown_difficulty") from None
    return generate_new_game(
        difficulty.rows, difficulty.cols, difficulty.mine_count, strategy, rng_seed
    )


def evaluate_status(board: Board, mine_count: int) -> str:
    """Derive the game status from the visible board.

    An exploded cell always means a loss, even if the board would otherwise
    count as won. Flags are not checked for correctness: the game is won as
    soon as only ``mine_count`` cells remain unrevealed.
    """
    if any(s.is_exploded for s in board.values()):
        return LOST
    unrevealed = sum(1 for s in board.values() if s.is_hidden or s.is_flagged)
    if unrevealed == mine_count:
        return WON
    return PLAYING


def _check_playing(game: Game) -> None:
    if game.status != PLAYING:
        raise InvalidGameStatus(f"game is {game.status}")


def _state_at(game: Game, cell: Cell) -> CellState:
    state = game.board.get(cell)
    if state is None:
        raise ValueError("out of bounds")
    return state


def reveal(game: Game, cell: Tuple[int, int], rng: Optional[random.Random] = None) -> Game:
    """Reveal a hidden cell, placing mines first if this is the opening move.

    A revealed 0 floods outwards through every hidden cell adjacent to it,
    and on through any further 0s. Flagged cells stop the flood.
    """
    cell = Cell(*cell)
    _check_playing(game)
    state = _state_at(game, cell)
    if not state.is_hidden:
        raise InvalidCellState(f"cannot reveal {state.kind} cell {tuple(cell)}")

    if not game.mines_placed:
        if rng is None:
            rng = random.Random(game.rng_seed)
        game = replace(game, mines=place_mines(game, cell, rng))

    board = dict(game.board)
    stack = [cell]
    while stack:
        cur = stack.pop()
        if not board[cur].is_hidden:
            continue
        if cur in game.mines:
            board[cur] = EXPLODED
            continue
        count = adjacent_mine_count(cur, game.mines)
        board[cur] = revealed(count)
        if count == 0:
            stack.extend(n for n in neighbors(cur, board) if board[n].is_hidden)

    return replace(game, board=board, status=evaluate_status(board, game.mine_count))


def toggle_flag(game: Game, cell: Tuple[int, int], rng: Optional[random.Random] = None) -> Game:
    """Flag a hidden cell or unflag a flagged one.

    Unflagging next to a revealed 0 reveals the cell straight away: such a cell
    can't be a mine, and leaving it hidden would strand it outside the flood.
    """
    cell = Cell(*cell)
    _check_playing(game)
    state = _state_at(game, cell)
    if not (state.is_hidden or state.is_flagged):
        raise InvalidCellState(f"cannot flag {state.kind} cell {tuple(cell)}")

    board = dict(game.board)
    board[cell] = FLAGGED if state.is_hidden else HIDDEN
    toggled = replace(game, board=board, status=evaluate_status(board, game.mine_count))
    if state.is_flagged and any(
        game.board[n] == revealed(0) for n in neighbors(cell, game.board)
    ):
        return reveal(toggled, cell, rng)
    return toggled


def _count(game: Game, kind: str) -> int:
    return sum(1 for s in game.board.values() if s.kind == kind)


def flags_total(game: Game) -> int:
    return _count(game, "flagged")


def revealed_total(game: Game) -> int:
    return _count(game, "revealed")


def to_client_view(game: Game) -> List[List[str]]:
    board: List[List[str]] = []
    for r in range(game.rows):
        row: List[str] = []
        for c in range(game.cols):
            cell = Cell(r, c)
            state = game.board[cell]
            if state.is_revealed:
                ch = str(state.adjacent)
            elif state.is_exploded:
                ch = "X"
            elif game.status != PLAYING and cell in game.mines:
                ch = "M"
            else:
                ch = "F" if state.is_flagged else "H"
            row.append(ch)
        board.append(row)
    return board
