"""Placement, gravity, matching and destruction on a CellGrid.

Rows are addressed top to bottom with row 0 at the top edge. Every routine
works in terms of ``grid.down`` (the row step toward the floor) so the same
code serves both gravity directions. Placement, shifting and rotation are
transactional: they either succeed completely or leave the grid untouched.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Optional, Sequence, Tuple

from puzzlefighter.components.cell import Cell, CellColor, CellKind
from puzzlefighter.components.cell_grid import CellGrid
from puzzlefighter.components.cell_group import CellGroup
from puzzlefighter.components.grid_position import GridPosition


@dataclass(slots=True)
class SettleResult:
    moved: List[Cell] = field(default_factory=list)
    created: List[CellGroup] = field(default_factory=list)
    expanded: List[CellGroup] = field(default_factory=list)
    combined: List[Tuple[CellGroup, CellGroup]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.moved or self.created or self.expanded or self.combined)


# ----------------------------------------------------------------------------
# Row queries
# ----------------------------------------------------------------------------

def open_row(grid: CellGrid, col: int) -> int:
    """Row a cell dropped into ``col`` from above would come to rest in, or -1."""
    if not grid.is_empty(grid.top_row, col):
        return -1
    return fall_row(grid, col, grid.top_row)


def fall_row(grid: CellGrid, col: int, row: int) -> int:
    """Lowest row reachable from ``row`` in ``col`` without passing an occupied slot."""
    while grid.is_empty(row + grid.down, col):
        row += grid.down
    return row


def target_row_for_columns(grid: CellGrid, cols: Iterable[int], row: int) -> int:
    """Highest viable resting row for a rigid body whose bottom edge is ``row``.

    Each column falls independently from ``row``; the most obstructed column
    bounds the whole body.
    """
    best = None
    for col in cols:
        target = fall_row(grid, col, row)
        if best is None or (target - best) * grid.down < 0:
            best = target
    return row if best is None else best


# ----------------------------------------------------------------------------
# Placement
# ----------------------------------------------------------------------------

def _place(grid: CellGrid, cell: Cell, row: int, col: int) -> None:
    grid.slots[row][col] = cell
    cell.position = GridPosition(row, col)


def add_cell(grid: CellGrid, cell: Cell, col: int) -> bool:
    """Drop a new cell into ``col``. Returns False when the column is full."""
    row = open_row(grid, col)
    if row < 0:
        return False
    _place(grid, cell, row, col)
    grid.track_cell(cell)
    return True


def remove_cell(grid: CellGrid, cell: Cell) -> None:
    """Detach a cell from its slot. Live-set membership is left alone."""
    pos = cell.position
    if pos is not None and grid.cell_at(pos.row, pos.col) is cell:
        grid.slots[pos.row][pos.col] = None


def set_column(grid: CellGrid, cell: Cell, col: int) -> bool:
    """Move a detached cell to the resting row of ``col``."""
    row = open_row(grid, col)
    if row < 0:
        return False
    _place(grid, cell, row, col)
    return True


def _restore(grid: CellGrid, moved: Sequence[Cell], originals: Dict[Cell, GridPosition]) -> None:
    for cell in moved:
        remove_cell(grid, cell)
    for cell, pos in originals.items():
        _place(grid, cell, pos.row, pos.col)


def shift_horizontal(grid: CellGrid, cells: Sequence[Cell], direction: int) -> bool:
    """Shift every cell one column in ``direction``; all or nothing."""
    if not cells or direction == 0:
        return False
    step = 1 if direction > 0 else -1
    originals = {cell: cell.position for cell in cells}
    for cell in cells:
        remove_cell(grid, cell)
    # Lowest cells first so the ones above stack on top of them.
    ordered = sorted(cells, key=lambda c: c.position.row * grid.down, reverse=True)
    placed: List[Cell] = []
    for cell in ordered:
        if not set_column(grid, cell, originals[cell].col + step):
            _restore(grid, placed, originals)
            return False
        placed.append(cell)
    return True


def rotate_point(lever: GridPosition, pivot: GridPosition, clockwise: bool) -> GridPosition:
    dx = lever.col - pivot.col
    dy = lever.row - pivot.row
    if clockwise:
        dx, dy = dy, -dx
    else:
        dx, dy = -dy, dx
    return GridPosition(pivot.row + dy, pivot.col + dx)


def rotate_cells(
    grid: CellGrid,
    lever: Cell,
    lever_pos: GridPosition,
    pivot: Cell,
    pivot_pos: GridPosition,
    clockwise: bool,
) -> Optional[Tuple[GridPosition, GridPosition]]:
    """Swing ``lever`` 90 degrees around ``pivot``.

    ``lever_pos``/``pivot_pos`` are the pieces' current (in flight) positions.
    A destination that is occupied or off the board (the headroom above the
    top edge included) gets a single wall kick away from the side it fell
    on. Returns the new (lever, pivot) positions, or None when the rotation is
    rejected and the grid is unchanged.
    """
    new_lever = rotate_point(lever_pos, pivot_pos, clockwise)
    new_pivot = pivot_pos
    originals = {lever: lever.position, pivot: pivot.position}
    remove_cell(grid, lever)
    remove_cell(grid, pivot)

    if not grid.is_empty(new_lever):
        kick = 1 if new_lever.col < new_pivot.col else -1
        new_lever = new_lever.offset(cols=kick)
        new_pivot = new_pivot.offset(cols=kick)
        if not (grid.is_empty(new_lever) and grid.is_empty(new_pivot)):
            _restore(grid, [], originals)
            return None

    # The cell nearer the floor has to land first; the other rests on it.
    if (new_lever.row - new_pivot.row) * grid.down > 0:
        order = ((lever, new_lever), (pivot, new_pivot))
    else:
        order = ((pivot, new_pivot), (lever, new_lever))
    placed: List[Cell] = []
    for cell, pos in order:
        if not set_column(grid, cell, pos.col):
            _restore(grid, placed, originals)
            return None
        placed.append(cell)
    return new_lever, new_pivot


# ----------------------------------------------------------------------------
# Settle pass
# ----------------------------------------------------------------------------

def on_fixed(grid: CellGrid) -> SettleResult:
    """Run one settle pass: gravity, 2x2 detection, expansion, merging."""
    result = SettleResult()
    result.moved = update_cell_positions(grid)
    result.created = detect_2x2(grid)
    result.expanded = expand_cell_groups(grid)
    result.combined = combine_cell_groups(grid)
    return result


def _rows_from_floor(grid: CellGrid) -> List[int]:
    return [grid.bottom_row - grid.down * i for i in range(grid.rows)]


def update_cell_positions(grid: CellGrid) -> List[Cell]:
    """Let loose cells fall and grouped cells fall as rigid rectangles."""
    moved: List[Cell] = []
    seen_groups: set[int] = set()
    for row in _rows_from_floor(grid)[1:]:
        for col in range(grid.cols):
            cell = grid.slots[row][col]
            if cell is None:
                continue
            group = cell.group
            if group is None:
                target = fall_row(grid, col, row)
                if target != row:
                    grid.slots[row][col] = None
                    _place(grid, cell, target, col)
                    moved.append(cell)
            elif id(group) not in seen_groups:
                seen_groups.add(id(group))
                moved.extend(_drop_group(grid, group))
    return moved


def _drop_group(grid: CellGrid, group: CellGroup) -> List[Cell]:
    target = target_row_for_columns(grid, group.columns(), group.origin_row)
    distance = (target - group.origin_row) * grid.down
    if distance <= 0:
        return []
    members = [grid.slots[pos.row][pos.col] for pos in group.footprint()]
    for pos in group.footprint():
        grid.slots[pos.row][pos.col] = None
    shift = distance * grid.down
    for cell in members:
        if cell is not None:
            _place(grid, cell, cell.position.row + shift, cell.position.col)
    group.origin_row += shift
    return [cell for cell in members if cell is not None]


def _joinable(grid: CellGrid, row: int, col: int, color: CellColor) -> bool:
    cell = grid.cell_at(row, col)
    return (
        cell is not None
        and cell.kind is CellKind.NORMAL
        and cell.color is color
        and cell.group is None
    )


def detect_2x2(grid: CellGrid) -> List[CellGroup]:
    """Create a group for every 2x2 block of loose, same-colored normal cells."""
    created: List[CellGroup] = []
    for row in _rows_from_floor(grid)[:-1]:
        above = row - grid.down
        for col in range(grid.cols - 1):
            anchor = grid.slots[row][col]
            if anchor is None:
                continue
            block = ((row, col), (row, col + 1), (above, col), (above, col + 1))
            if not all(_joinable(grid, r, c, anchor.color) for r, c in block):
                continue
            if grid.group_at_origin(row, col) is not None:
                continue
            group = CellGroup(representative=anchor, origin_row=row, origin_col=col, direction=grid.down)
            for r, c in block:
                grid.slots[r][c].group = group
            grid.track_group(group)
            created.append(group)
    return created


def expand_cell_groups(grid: CellGrid) -> List[CellGroup]:
    """Grow each group by at most one unit per side into matching loose cells."""
    expanded: List[CellGroup] = []
    for group in grid.live_groups():
        color = group.color
        up_row = group.origin_row - grid.down * group.height
        down_row = group.origin_row + grid.down
        grow_up = all(_joinable(grid, up_row, c, color) for c in group.columns())
        grow_down = all(_joinable(grid, down_row, c, color) for c in group.columns())
        if grow_up:
            for c in group.columns():
                grid.slots[up_row][c].group = group
            group.height += 1
        if grow_down:
            for c in group.columns():
                grid.slots[down_row][c].group = group
            group.origin_row = down_row
            group.height += 1

        right_col = group.origin_col + group.width
        left_col = group.origin_col - 1
        grow_right = all(_joinable(grid, r, right_col, color) for r in group.rows())
        grow_left = all(_joinable(grid, r, left_col, color) for r in group.rows())
        if grow_right:
            for r in group.rows():
                grid.slots[r][right_col].group = group
            group.width += 1
        if grow_left:
            for r in group.rows():
                grid.slots[r][left_col].group = group
            group.origin_col = left_col
            group.width += 1

        if grow_up or grow_down or grow_right or grow_left:
            expanded.append(group)
    return expanded


def combine_cell_groups(grid: CellGrid) -> List[Tuple[CellGroup, CellGroup]]:
    """Merge same-colored groups that share a full edge.

    Returns (absorbing, absorbed) pairs. The absorbing group keeps its origin
    and representative; cells of the absorbed group are re-pointed at it.
    """
    merges: List[Tuple[CellGroup, CellGroup]] = []
    absorbed: set[int] = set()
    groups = grid.live_groups()
    for first in groups:
        if id(first) in absorbed:
            continue
        for second in groups:
            if second is first or id(second) in absorbed or second.color is not first.color:
                continue
            stacked = (
                second.origin_col == first.origin_col
                and second.width == first.width
                and second.origin_row == first.origin_row - grid.down * first.height
            )
            beside = (
                second.origin_row == first.origin_row
                and second.height == first.height
                and second.origin_col == first.origin_col + first.width
            )
            if not (stacked or beside):
                continue
            for pos in second.footprint():
                cell = grid.slots[pos.row][pos.col]
                if cell is not None:
                    cell.group = first
            if stacked:
                first.height += second.height
            else:
                first.width += second.width
            grid.forget_group(second)
            absorbed.add(id(second))
            merges.append((first, second))
    return merges


# ----------------------------------------------------------------------------
# Destruction
# ----------------------------------------------------------------------------

def find_connected(grid: CellGrid, row: int, col: int) -> List[Cell]:
    """Flood fill the same-colored component around (row, col).

    Counter cells are never entered, so they block the fill.
    """
    initial = grid.cell_at(row, col)
    if initial is None:
        return []
    seen = {(row, col)}
    queue: Deque[Tuple[int, int]] = deque([(row, col)])
    found: List[Cell] = []
    while queue:
        r, c = queue.popleft()
        found.append(grid.slots[r][c])
        for nr, nc in ((r, c - 1), (r, c + 1), (r - 1, c), (r + 1, c)):
            if (nr, nc) in seen:
                continue
            neighbor = grid.cell_at(nr, nc)
            if neighbor is None or neighbor.kind is CellKind.COUNTER or neighbor.color is not initial.color:
                continue
            seen.add((nr, nc))
            queue.append((nr, nc))
    return found


def cells_to_destroy(grid: CellGrid) -> List[Cell]:
    marked: Dict[Cell, None] = {}
    for row in _rows_from_floor(grid):
        for col in range(grid.cols):
            cell = grid.slots[row][col]
            if cell is None or cell.kind is not CellKind.BOMB or cell in marked:
                continue
            chain = find_connected(grid, row, col)
            if len(chain) > 1:
                marked.update(dict.fromkeys(chain))
    return list(marked)


def destroy_connected(grid: CellGrid) -> List[Cell]:
    """Detonate every bomb touching same-colored cells, then settle.

    All chains are collected before anything is removed. Destroyed cells keep
    their ``group`` reference so scoring can tell grouped from loose cells.
    """
    doomed = cells_to_destroy(grid)
    for cell in doomed:
        remove_cell(grid, cell)
        grid.forget_cell(cell)
        if cell.group is not None:
            grid.forget_group(cell.group)
    on_fixed(grid)
    return doomed


# ----------------------------------------------------------------------------
# Debug dump
# ----------------------------------------------------------------------------

def debug_rows(grid: CellGrid) -> List[str]:
    """Character rows, top first: '_' empty, 'g' grouped, upper case bombs."""
    lines: List[str] = []
    for row in range(grid.rows):
        chars = []
        for col in range(grid.cols):
            cell = grid.slots[row][col]
            if cell is None:
                chars.append("_")
            elif cell.in_group:
                chars.append("g")
            elif cell.kind is CellKind.BOMB:
                chars.append(cell.color.letter.upper())
            else:
                chars.append(cell.color.letter)
        lines.append("".join(chars))
    return lines


def debug_string(grid: CellGrid) -> str:
    return "\n".join(debug_rows(grid))
