from typing import Dict, List

from esper import World

from puzzlefighter.components.board import Board
from puzzlefighter.constants import GRID_COLS, GRID_ROWS
from puzzlefighter.events.bus import EventBus
from puzzlefighter.rendering.draw_commands import DrawCommand, collect_draw_commands
from puzzlefighter.ui.layout import BoardLayout, compute_board_layouts


class BoardRenderSystem:
    def __init__(self, world: World, event_bus: EventBus, window):
        self.world = world
        self.event_bus = event_bus
        self.window = window
        self._last_window_size = (self.window.width, self.window.height)
        self._layouts: Dict[int, BoardLayout] = {}
        self._last_commands: List[DrawCommand] = []
        self._recalculate_layouts()

    def notify_resize(self, width: int, height: int):
        self._last_window_size = (width, height)
        self._recalculate_layouts()

    def _recalculate_layouts(self):
        boards = sorted((board for _, board in self.world.get_component(Board)), key=lambda b: b.index)
        rows = boards[0].rows if boards else GRID_ROWS
        cols = boards[0].cols if boards else GRID_COLS
        width, height = self._last_window_size
        layouts = compute_board_layouts(width, height, len(boards), rows, cols)
        self._layouts = {board.index: layout for board, layout in zip(boards, layouts)}

    @property
    def layouts(self) -> Dict[int, BoardLayout]:
        return self._layouts

    @property
    def last_commands(self) -> List[DrawCommand]:
        return self._last_commands

    def process(self):
        # Local import keeps tests headless without creating a window.
        import arcade
        headless = False
        try:
            arcade.get_window()
        except Exception:
            headless = True
        if (self.window.width, self.window.height) != self._last_window_size:
            self.notify_resize(self.window.width, self.window.height)
        self._last_commands = collect_draw_commands(self.world, self._layouts)
        if headless:
            return
        for cmd in self._last_commands:
            arcade.draw_lrbt_rectangle_filled(cmd.left, cmd.right, cmd.bottom, cmd.top, cmd.color)
            if cmd.outline is not None:
                arcade.draw_lrbt_rectangle_outline(cmd.left, cmd.right, cmd.bottom, cmd.top, cmd.outline, 2)
