from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class GridPosition:
    """Immutable (row, col) address on a board. Row 0 is the top edge."""
    row: int
    col: int

    def offset(self, rows: int = 0, cols: int = 0) -> "GridPosition":
        return GridPosition(self.row + rows, self.col + cols)
