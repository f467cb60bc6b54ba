"""Turns board state into plain rectangle commands.

Nothing here touches Arcade, so the output can be inspected in tests; the
render system replays the commands with real draw calls.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from esper import World

from puzzlefighter.components.board import Board, Gravity
from puzzlefighter.components.cell import CellColor, CellKind
from puzzlefighter.components.cell_body import CellBody
from puzzlefighter.components.cell_grid import CellGrid
from puzzlefighter.constants import CELL_PADDING
from puzzlefighter.ui.layout import BoardLayout

RGB = Tuple[int, int, int]

CELL_COLORS: Dict[CellColor, RGB] = {
    CellColor.RED: (200, 60, 60),
    CellColor.GREEN: (80, 170, 80),
    CellColor.BLUE: (70, 90, 190),
    CellColor.YELLOW: (210, 190, 70),
}
BOARD_BACKGROUND: RGB = (28, 28, 36)
GROUP_OUTLINE: RGB = (240, 240, 240)
BOMB_OUTLINE: RGB = (20, 20, 20)


@dataclass(slots=True, frozen=True)
class DrawCommand:
    kind: str  # "board", "cell", "bomb", "counter" or "group"
    left: float
    right: float
    bottom: float
    top: float
    color: RGB
    outline: RGB | None = None


def _counter_tint(color: RGB) -> RGB:
    return tuple((channel + 128) // 2 for channel in color)  # type: ignore[return-value]


def collect_draw_commands(world: World, layouts: Dict[int, BoardLayout]) -> List[DrawCommand]:
    """Rectangles for every board (by index) that has a layout, backgrounds first."""
    commands: List[DrawCommand] = []
    board_layouts: Dict[int, Tuple[BoardLayout, bool]] = {}
    for ent, (board, grid) in sorted(world.get_components(Board, CellGrid), key=lambda item: item[1][0].index):
        layout = layouts.get(board.index)
        if layout is None:
            continue
        board_layouts[ent] = (layout, board.gravity is Gravity.DOWN)
        commands.append(DrawCommand(
            kind="board",
            left=layout.left,
            right=layout.left + layout.width,
            bottom=layout.bottom,
            top=layout.bottom + layout.height,
            color=BOARD_BACKGROUND,
        ))

    bodies = sorted(world.get_component(CellBody), key=lambda item: item[0])
    for _, body in bodies:
        entry = board_layouts.get(body.board)
        if entry is None:
            continue
        layout, floor_is_last_row = entry
        cell = body.cell
        color = CELL_COLORS[cell.color]
        width = height = 1
        group = cell.group
        if group is not None and group.representative is cell:
            kind = "group"
            width, height = group.width, group.height
            outline: RGB | None = GROUP_OUTLINE
        elif cell.kind is CellKind.BOMB:
            kind = "bomb"
            outline = BOMB_OUTLINE
        elif cell.kind is CellKind.COUNTER:
            kind = "counter"
            color = _counter_tint(color)
            outline = None
        else:
            kind = "cell"
            outline = None
        cx, cy = layout.cell_center(body.row, body.col, floor_is_last_row=floor_is_last_row)
        half_w = width * layout.cell_size / 2 - CELL_PADDING
        half_h = height * layout.cell_size / 2 - CELL_PADDING
        commands.append(DrawCommand(
            kind=kind,
            left=cx - half_w,
            right=cx + half_w,
            bottom=cy - half_h,
            top=cy + half_h,
            color=color,
            outline=outline,
        ))
    return commands
