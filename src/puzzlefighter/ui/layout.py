from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from puzzlefighter.constants import BOTTOM_MARGIN, MIN_CELL_SIZE, SIDE_GAP, TOP_MARGIN


@dataclass(slots=True, frozen=True)
class BoardLayout:
    """Screen placement of one board. ``left``/``bottom`` are in window pixels."""
    index: int
    left: float
    bottom: float
    cell_size: int
    rows: int
    cols: int

    @property
    def width(self) -> float:
        return self.cols * self.cell_size

    @property
    def height(self) -> float:
        return self.rows * self.cell_size

    def cell_center(self, row: float, col: float, *, floor_is_last_row: bool = True) -> Tuple[float, float]:
        """Screen centre of grid coordinates; the floor row is always drawn at the bottom."""
        from_floor = (self.rows - 1 - row) if floor_is_last_row else row
        x = self.left + (col + 0.5) * self.cell_size
        y = self.bottom + (from_floor + 0.5) * self.cell_size
        return x, y


def compute_board_layouts(
    window_width: int,
    window_height: int,
    count: int,
    rows: int,
    cols: int,
) -> List[BoardLayout]:
    """Place ``count`` boards side by side, centred, sharing one cell size.

    Mirrors the single-board geometry rules: fit the tightest axis, never go
    below ``MIN_CELL_SIZE``, keep ``BOTTOM_MARGIN`` under the boards.
    """
    if count <= 0:
        return []
    usable_w = max(0.0, window_width - SIDE_GAP * (count + 1))
    usable_h = max(0.0, window_height - BOTTOM_MARGIN - TOP_MARGIN)
    cell_by_w = usable_w / (count * cols)
    cell_by_h = usable_h / rows
    cell_size = int(min(cell_by_w, cell_by_h))
    if cell_size < MIN_CELL_SIZE:
        cell_size = MIN_CELL_SIZE
    board_w = cols * cell_size
    total_w = count * board_w + (count - 1) * SIDE_GAP
    start_x = (window_width - total_w) / 2
    return [
        BoardLayout(
            index=i,
            left=start_x + i * (board_w + SIDE_GAP),
            bottom=BOTTOM_MARGIN,
            cell_size=cell_size,
            rows=rows,
            cols=cols,
        )
        for i in range(count)
    ]
