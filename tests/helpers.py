from __future__ import annotations

from typing import Dict, Sequence, Tuple

from esper import World

from puzzlefighter.components.board import BoardSettings, Gravity
from puzzlefighter.components.cell import Cell, CellColor, CellKind, CellSpawn
from puzzlefighter.components.cell_grid import CellGrid
from puzzlefighter.components.grid_position import GridPosition
from puzzlefighter.events.bus import EVENT_TICK, EventBus
from puzzlefighter.systems.round_state_machine import RoundStateMachine
from puzzlefighter.world import create_board

LETTER_COLORS: Dict[str, CellColor] = {color.letter: color for color in CellColor}
# Counter cells have no letter in the debug dump; layouts use digits for them.
COUNTER_DIGITS: Dict[str, CellColor] = {
    "1": CellColor.RED,
    "2": CellColor.GREEN,
    "3": CellColor.BLUE,
    "4": CellColor.YELLOW,
}


def grid_from_rows(rows: Sequence[str], gravity: Gravity = Gravity.DOWN) -> CellGrid:
    """Build a grid from an ASCII layout, top row first.

    ``_`` is empty, lower case letters are normal cells, upper case letters
    are bombs and digits 1-4 are counter cells (red, green, blue, yellow).
    Cells are written straight into their slots; no gravity is applied.
    """
    grid = CellGrid(rows=len(rows), cols=len(rows[0]), gravity=gravity)
    for r, line in enumerate(rows):
        assert len(line) == grid.cols, f"row {r} has width {len(line)}"
        for c, char in enumerate(line):
            if char == "_":
                continue
            if char in COUNTER_DIGITS:
                cell = Cell(COUNTER_DIGITS[char], CellKind.COUNTER)
            elif char.isupper():
                cell = Cell(LETTER_COLORS[char.lower()], CellKind.BOMB)
            else:
                cell = Cell(LETTER_COLORS[char], CellKind.NORMAL)
            cell.position = GridPosition(r, c)
            grid.slots[r][c] = cell
            grid.track_cell(cell)
    return grid


def drive(bus: EventBus, count: int = 60, dt: float = 0.1) -> None:
    for _ in range(count):
        bus.emit(EVENT_TICK, dt=dt)


class ScriptedSpawner:
    """Spawner stand-in that hands out fixed pieces per round."""

    def __init__(self, pieces: Dict[int, Sequence[CellSpawn]] | None = None, default: Sequence[CellSpawn] = ()):
        self.pieces = dict(pieces or {})
        self.default = tuple(default)

    def request_cells_for_round(self, round_index: int):
        piece = self.pieces.get(round_index, self.default)
        return tuple(CellSpawn(spec.color, spec.kind, round_index) for spec in piece)

    def counter_cells(self, round_index: int, amount: int):
        return [CellSpawn(CellColor.RED, CellKind.COUNTER, round_index) for _ in range(amount)]


def spec(letter: str) -> CellSpawn:
    """Single spawn spec from a layout letter (upper case = bomb)."""
    kind = CellKind.BOMB if letter.isupper() else CellKind.NORMAL
    return CellSpawn(LETTER_COLORS[letter.lower()], kind, 0)


def make_machine(
    bus: EventBus,
    spawner,
    *,
    rows: int = 6,
    cols: int = 4,
    gravity: Gravity = Gravity.DOWN,
    settings: BoardSettings | None = None,
) -> Tuple[World, RoundStateMachine]:
    world = World()
    entity = create_board(world, 0, rows=rows, cols=cols, gravity=gravity, settings=settings)
    return world, RoundStateMachine(world, bus, entity, spawner)


def tick_until(machine: RoundStateMachine, predicate, *, dt: float = 0.1, limit: int = 1000) -> int:
    for count in range(limit):
        if predicate():
            return count
        machine.tick(dt)
    raise AssertionError("condition not reached")
