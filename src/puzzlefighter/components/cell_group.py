from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, List, Tuple

from puzzlefighter.components.grid_position import GridPosition

if TYPE_CHECKING:
    from puzzlefighter.components.cell import Cell, CellColor


@dataclass(slots=True, eq=False)
class CellGroup:
    """Rectangular power group of same-colored normal cells.

    The origin is the bottom-left corner of the rectangle, where "bottom" is
    the side gravity pulls toward. ``direction`` is the board's gravity sign:
    the footprint spans ``height`` rows from the origin stepping against it.
    Groups compare by identity; use ``CellGrid.group_at_origin`` for
    positional lookups.
    """
    representative: Cell
    origin_row: int
    origin_col: int
    width: int = 2
    height: int = 2
    direction: int = 1

    @property
    def color(self) -> CellColor:
        return self.representative.color

    @property
    def origin(self) -> GridPosition:
        return GridPosition(self.origin_row, self.origin_col)

    @property
    def top_row(self) -> int:
        return self.origin_row - self.direction * (self.height - 1)

    @property
    def size(self) -> int:
        return self.width * self.height

    def rows(self) -> List[int]:
        return [self.origin_row - self.direction * i for i in range(self.height)]

    def columns(self) -> List[int]:
        return list(range(self.origin_col, self.origin_col + self.width))

    def footprint(self) -> Iterator[GridPosition]:
        for row in self.rows():
            for col in self.columns():
                yield GridPosition(row, col)

    def contains(self, row: int, col: int) -> bool:
        low, high = sorted((self.origin_row, self.top_row))
        return low <= row <= high and self.origin_col <= col < self.origin_col + self.width

    def center(self) -> Tuple[float, float]:
        """Return the (row, col) centre of the rectangle in grid units."""
        row = (self.origin_row + self.top_row) / 2
        col = self.origin_col + (self.width - 1) / 2
        return row, col
