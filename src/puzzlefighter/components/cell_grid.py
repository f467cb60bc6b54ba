from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from puzzlefighter.components.board import Gravity
from puzzlefighter.components.cell import Cell
from puzzlefighter.components.cell_group import CellGroup
from puzzlefighter.components.grid_position import GridPosition


@dataclass(slots=True)
class CellGrid:
    """Authoritative cell storage for one board.

    ``slots`` is a rows x cols matrix of optional cells. The live sets are kept
    as insertion-ordered dicts so iteration (and therefore every algorithm in
    ``puzzlefighter.systems.grid_ops``) is deterministic. Placement, gravity,
    matching and destruction live in ``grid_ops``; this component only answers
    queries about the stored state.
    """
    rows: int
    cols: int
    gravity: Gravity = Gravity.DOWN
    slots: List[List[Optional[Cell]]] = field(init=False, repr=False)
    _cells: Dict[Cell, None] = field(init=False, repr=False)
    _groups: Dict[CellGroup, None] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {self.rows}x{self.cols}")
        self.slots = [[None] * self.cols for _ in range(self.rows)]
        self._cells = {}
        self._groups = {}

    @property
    def down(self) -> int:
        """Row step that moves one cell toward the floor."""
        return self.gravity.value

    @property
    def bottom_row(self) -> int:
        return self.rows - 1 if self.down > 0 else 0

    @property
    def top_row(self) -> int:
        return 0 if self.down > 0 else self.rows - 1

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def in_headroom(self, row: int, col: int) -> bool:
        """True for positions above the top edge of a valid column (spawn area)."""
        if not 0 <= col < self.cols:
            return False
        return row < 0 if self.down > 0 else row >= self.rows

    def cell_at(self, row: int, col: int) -> Optional[Cell]:
        if not self.in_bounds(row, col):
            return None
        return self.slots[row][col]

    def is_empty(self, row: int | GridPosition, col: int | None = None) -> bool:
        if isinstance(row, GridPosition):
            row, col = row.row, row.col
        return self.in_bounds(row, col) and self.slots[row][col] is None

    def is_clear(self, pos: GridPosition) -> bool:
        """Like ``is_empty`` but also accepts the headroom above the board."""
        return self.in_headroom(pos.row, pos.col) or self.is_empty(pos)

    def cell_exists(self, cell: Cell) -> bool:
        return cell in self._cells

    def group_exists(self, group: CellGroup) -> bool:
        return group in self._groups

    def group_at_origin(self, row: int, col: int) -> Optional[CellGroup]:
        for group in self._groups:
            if group.origin_row == row and group.origin_col == col:
                return group
        return None

    def live_cells(self) -> List[Cell]:
        return list(self._cells)

    def live_groups(self) -> List[CellGroup]:
        return list(self._groups)

    def track_cell(self, cell: Cell) -> None:
        self._cells[cell] = None

    def forget_cell(self, cell: Cell) -> None:
        self._cells.pop(cell, None)

    def track_group(self, group: CellGroup) -> None:
        self._groups[group] = None

    def forget_group(self, group: CellGroup) -> None:
        self._groups.pop(group, None)
