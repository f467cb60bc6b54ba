import random

import pytest

from puzzlefighter.constants import DROP_SPEED, NORMAL_SPEED
from puzzlefighter.events.bus import EVENT_BOARD_INPUT, EVENT_KEY_PRESS, EVENT_KEY_RELEASE, EventBus
from puzzlefighter.systems.input import ACTION_LEFT, InputSystem
from puzzlefighter.utils.input_throttle import InputThrottle
from puzzlefighter.world import create_world

KEY_LEFT = 65361
KEY_DOWN = 65364
KEY_X = 120
KEY_A = 97


class _FakeClock:
    def __init__(self) -> None:
        self.value = 0.0

    def advance(self, amount: float) -> None:
        self.value += amount

    def __call__(self) -> float:
        return self.value


@pytest.fixture
def session():
    bus = EventBus()
    world = create_world(bus, player_count=2, rng=random.Random(3))
    clock = _FakeClock()
    system = InputSystem(world, bus, world.machines, throttle=InputThrottle(clock=clock))
    for machine in world.machines:
        machine.tick(0.1)
    return bus, world, system, clock


def _cols(machine):
    return [body.cell.position.col for _, body in machine.falling()]


def _press(bus, symbol):
    bus.emit(EVENT_KEY_PRESS, symbol=symbol, modifiers=0)


def _release(bus, symbol):
    bus.emit(EVENT_KEY_RELEASE, symbol=symbol, modifiers=0)


def test_key_press_becomes_board_input(session):
    bus, world, system, clock = session
    inputs = []
    bus.subscribe(EVENT_BOARD_INPUT, lambda sender, **kw: inputs.append(kw))

    _press(bus, KEY_LEFT)

    assert inputs == [{"board_index": 0, "action": ACTION_LEFT, "pressed": True}]
    first, second = world.machines
    assert _cols(first) == [1, 1]
    assert _cols(second) == [2, 2]


def test_second_player_keys_drive_second_board(session):
    bus, world, system, clock = session

    _press(bus, KEY_A)

    first, second = world.machines
    assert _cols(first) == [2, 2]
    assert _cols(second) == [1, 1]


def test_unknown_key_is_ignored(session):
    bus, world, system, clock = session
    inputs = []
    bus.subscribe(EVENT_BOARD_INPUT, lambda sender, **kw: inputs.append(kw))

    _press(bus, 9999)

    assert inputs == []


def test_repeated_press_waits_for_move_delay(session):
    bus, world, system, clock = session
    machine = world.machines[0]

    _press(bus, KEY_LEFT)
    _release(bus, KEY_LEFT)
    _press(bus, KEY_LEFT)
    assert _cols(machine) == [1, 1]

    clock.advance(0.2)
    _press(bus, KEY_LEFT)
    assert _cols(machine) == [0, 0]


def test_held_move_repeats_on_tick_until_released(session):
    bus, world, system, clock = session
    machine = world.machines[0]

    _press(bus, KEY_LEFT)
    system.on_tick(None, dt=0.1)
    assert _cols(machine) == [1, 1]

    clock.advance(0.2)
    system.on_tick(None, dt=0.1)
    assert _cols(machine) == [0, 0]

    _release(bus, KEY_LEFT)
    clock.advance(0.2)
    system.on_tick(None, dt=0.1)
    assert _cols(machine) == [0, 0]


def test_drop_is_held_while_key_is_down(session):
    bus, world, system, clock = session
    machine = world.machines[0]

    _press(bus, KEY_DOWN)
    assert machine.state.speed == DROP_SPEED

    _release(bus, KEY_DOWN)
    assert machine.state.speed == NORMAL_SPEED


def test_rotate_key_waits_until_piece_is_on_board(session):
    bus, world, system, clock = session
    machine = world.machines[0]

    _press(bus, KEY_X)
    assert _cols(machine) == [2, 2]
    assert system.throttle.allow(0, "rotate_cw")

    for _ in range(13):
        machine.tick(0.1)
    _press(bus, KEY_X)

    assert _cols(machine) == [3, 2]
    assert not system.throttle.allow(0, "rotate_cw")


def test_apply_unknown_board_is_rejected(session):
    bus, world, system, clock = session
    assert system.apply(7, ACTION_LEFT) is False
