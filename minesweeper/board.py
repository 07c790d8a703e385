from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, NamedTuple, Set


class Cell(NamedTuple):
    row: int
    col: int


@dataclass(frozen=True)
class CellState:
    """Visible state of a single cell.

    ``kind`` is one of ``hidden``, ``flagged``, ``exploded`` or ``revealed``;
    ``adjacent`` only carries meaning for revealed cells.
    """

    kind: str
    adjacent: int = 0

    @property
    def is_hidden(self) -> bool:
        return self.kind == "hidden"

    @property
    def is_flagged(self) -> bool:
        return self.kind == "flagged"

    @property
    def is_exploded(self) -> bool:
        return self.kind == "exploded"

    @property
    def is_revealed(self) -> bool:
        return self.kind == "revealed"


HIDDEN = CellState("hidden")
FLAGGED = CellState("flagged")
EXPLODED = CellState("exploded")


def revealed(adjacent: int) -> CellState:
    return CellState("revealed", adjacent)


Board = Dict[Cell, CellState]


def new_board(rows: int, cols: int) -> Board:
    return {Cell(r, c): HIDDEN for r in range(rows) for c in range(cols)}


def is_adjacent(a: Cell, b: Cell) -> bool:
    return a != b and abs(a.row - b.row) <= 1 and abs(a.col - b.col) <= 1


def neighbors(cell: Cell, board: Board) -> Set[Cell]:
    out = set()
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            n = Cell(cell.row + dr, cell.col + dc)
            if n in board:
                out.add(n)
    return out


def adjacent_mine_count(cell: Cell, mines: Iterable[Cell]) -> int:
    return sum(1 for m in mines if is_adjacent(cell, m))
