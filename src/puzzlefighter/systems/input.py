from __future__ import annotations

from typing import Dict, Iterable, Mapping, Set, Tuple

from esper import World

from puzzlefighter.events.bus import (
    EVENT_BOARD_INPUT,
    EVENT_KEY_PRESS,
    EVENT_KEY_RELEASE,
    EVENT_TICK,
    EventBus,
)
from puzzlefighter.systems.round_state_machine import RoundStateMachine
from puzzlefighter.utils.input_throttle import InputThrottle

ACTION_LEFT = "left"
ACTION_RIGHT = "right"
ACTION_DROP = "drop"
ACTION_ROTATE_CW = "rotate_cw"
ACTION_ROTATE_CCW = "rotate_ccw"

# Held lateral moves repeat on tick once the throttle window has passed.
REPEATING_ACTIONS = (ACTION_LEFT, ACTION_RIGHT)

# Raw pyglet/arcade key codes so this module stays importable without a window.
DEFAULT_KEY_MAPS: Dict[int, Dict[int, str]] = {
    0: {
        65361: ACTION_LEFT,        # LEFT
        65363: ACTION_RIGHT,       # RIGHT
        65364: ACTION_DROP,        # DOWN
        65362: ACTION_ROTATE_CCW,  # UP
        122: ACTION_ROTATE_CCW,    # Z
        120: ACTION_ROTATE_CW,     # X
    },
    1: {
        97: ACTION_LEFT,           # A
        100: ACTION_RIGHT,         # D
        115: ACTION_DROP,          # S
        113: ACTION_ROTATE_CCW,    # Q
        101: ACTION_ROTATE_CW,     # E
    },
}


class InputSystem:
    """Translates key events into board actions and applies them to round machines."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        machines: Iterable[RoundStateMachine],
        *,
        key_maps: Mapping[int, Mapping[int, str]] | None = None,
        throttle: InputThrottle | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.machines: Dict[int, RoundStateMachine] = {m.board.index: m for m in machines}
        self.key_maps = {idx: dict(keys) for idx, keys in (key_maps or DEFAULT_KEY_MAPS).items()}
        self._throttle = throttle or InputThrottle()
        self._held: Set[Tuple[int, str]] = set()
        self.event_bus.subscribe(EVENT_KEY_PRESS, self.on_key_press)
        self.event_bus.subscribe(EVENT_KEY_RELEASE, self.on_key_release)
        self.event_bus.subscribe(EVENT_BOARD_INPUT, self.on_board_input)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    @property
    def throttle(self) -> InputThrottle:
        return self._throttle

    def on_key_press(self, sender, **kwargs):
        self._emit_for_symbol(kwargs.get('symbol'), pressed=True)

    def on_key_release(self, sender, **kwargs):
        self._emit_for_symbol(kwargs.get('symbol'), pressed=False)

    def _emit_for_symbol(self, symbol, *, pressed: bool) -> None:
        if symbol is None:
            return
        for board_index, keys in self.key_maps.items():
            action = keys.get(symbol)
            if action is not None:
                self.event_bus.emit(EVENT_BOARD_INPUT, board_index=board_index, action=action, pressed=pressed)

    def on_board_input(self, sender, **kwargs):
        board_index = kwargs.get('board_index')
        action = kwargs.get('action')
        pressed = bool(kwargs.get('pressed', True))
        if board_index not in self.machines or action is None:
            return
        key = (board_index, action)
        if pressed:
            self._held.add(key)
            self.apply(board_index, action)
            return
        self._held.discard(key)
        if action == ACTION_DROP:
            self.machines[board_index].drop(False)

    def on_tick(self, sender, **kwargs):
        for board_index, action in sorted(self._held):
            if action in REPEATING_ACTIONS:
                self.apply(board_index, action)

    def apply(self, board_index: int, action: str) -> bool:
        """Run one action if its throttle window allows it. True when the board accepted it."""
        machine = self.machines.get(board_index)
        if machine is None or not self._throttle.allow(board_index, action):
            return False
        if action == ACTION_LEFT:
            delay = machine.move_horizontal(-1)
        elif action == ACTION_RIGHT:
            delay = machine.move_horizontal(1)
        elif action == ACTION_ROTATE_CW:
            delay = machine.rotate(-1)
        elif action == ACTION_ROTATE_CCW:
            delay = machine.rotate(1)
        elif action == ACTION_DROP:
            machine.drop(True)
            return True
        else:
            return False
        self._throttle.block(board_index, action, delay)
        return delay > 0.0
