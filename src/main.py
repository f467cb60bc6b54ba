"""Entry point for the puzzle fighter prototype.

Sets up the ECS world, event bus, systems, and Arcade window.
"""
import logging

from arcade import Window, run, set_background_color, color

from puzzlefighter.constants import WINDOW_HEIGHT, WINDOW_WIDTH
from puzzlefighter.components.board import Gravity
from puzzlefighter.events.bus import (
    EVENT_BOARD_LOST,
    EVENT_BOARD_WON,
    EVENT_KEY_PRESS,
    EVENT_KEY_RELEASE,
    EVENT_TICK,
    EventBus,
)
from puzzlefighter.systems.input import InputSystem
from puzzlefighter.systems.render import BoardRenderSystem
from puzzlefighter.world import create_world


class PuzzleFighterWindow(Window):
    def __init__(self, player_count: int = 2):
        super().__init__(WINDOW_WIDTH, WINDOW_HEIGHT, "Puzzle Fighter", resizable=True)
        self.set_update_rate(1/60)
        self.event_bus = EventBus()
        self.world = create_world(
            self.event_bus,
            player_count=player_count,
            gravity=Gravity.DOWN,
        )
        self.input_system = InputSystem(self.world, self.event_bus, self.world.machines)
        self.render_system = BoardRenderSystem(self.world, self.event_bus, self)
        self.finished = False
        self.event_bus.subscribe(EVENT_BOARD_WON, self._on_finished)
        self.event_bus.subscribe(EVENT_BOARD_LOST, self._on_board_lost)
        set_background_color(color.BLACK)

    def _on_finished(self, sender, **kwargs):
        self.finished = True

    def _on_board_lost(self, sender, **kwargs):
        if len(self.world.machines) == 1:
            self.finished = True

    def on_resize(self, width: int, height: int):
        self.render_system.notify_resize(width, height)
        return super().on_resize(width, height)

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_update(self, delta_time: float):
        if not self.finished:
            self.event_bus.emit(EVENT_TICK, dt=delta_time)

    def on_key_press(self, symbol: int, modifiers: int):
        self.event_bus.emit(EVENT_KEY_PRESS, symbol=symbol, modifiers=modifiers)

    def on_key_release(self, symbol: int, modifiers: int):
        self.event_bus.emit(EVENT_KEY_RELEASE, symbol=symbol, modifiers=modifiers)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    PuzzleFighterWindow()
    run()

if __name__ == "__main__":
    main()
