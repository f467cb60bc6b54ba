import random
from dataclasses import replace
from typing import List, Sequence

from esper import World

from puzzlefighter.components.board import Board, BoardSettings, Gravity
from puzzlefighter.components.cell_grid import CellGrid
from puzzlefighter.components.pending_counter import PendingCounter
from puzzlefighter.components.round_state import RoundState
from puzzlefighter.constants import GRID_COLS, GRID_ROWS, PIECE_SIZE
from puzzlefighter.events.bus import EventBus
from puzzlefighter.systems.cell_spawner import CellSpawner
from puzzlefighter.systems.round_state_machine import RoundStateMachine
from puzzlefighter.systems.versus_system import VersusSystem
from puzzlefighter.utils.round_state import iter_boards


def create_board(
    world: World,
    index: int,
    *,
    rows: int = GRID_ROWS,
    cols: int = GRID_COLS,
    gravity: Gravity = Gravity.DOWN,
    settings: BoardSettings | None = None,
) -> int:
    board = Board(rows=rows, cols=cols, gravity=gravity, index=index)
    settings = settings or BoardSettings()
    if not 0 <= settings.spawn_column < cols:
        raise ValueError(f"Spawn column {settings.spawn_column} is outside a board {cols} columns wide")
    return world.create_entity(
        board,
        settings,
        CellGrid(rows=rows, cols=cols, gravity=gravity),
        RoundState(speed=settings.normal_speed),
        PendingCounter(),
    )


def create_world(
    event_bus: EventBus,
    *,
    player_count: int = 1,
    rows: int = GRID_ROWS,
    cols: int = GRID_COLS,
    gravity: Gravity | Sequence[Gravity] = Gravity.DOWN,
    settings: BoardSettings | None = None,
    piece_size: int = PIECE_SIZE,
    rng: random.Random | None = None,
) -> World:
    """Build a session: one board entity per player, a shared spawner, round machines and versus rules.

    ``gravity`` may be a single value or one per board. The spawner, machines
    and versus system are attached to the world as ``spawner``, ``machines``
    and ``versus``.
    """
    if player_count <= 0:
        raise ValueError(f"player_count must be positive, got {player_count}")
    world = World()
    setattr(world, "random", rng or random.Random())
    gravities = [gravity] * player_count if isinstance(gravity, Gravity) else list(gravity)
    if len(gravities) != player_count:
        raise ValueError(f"Expected {player_count} gravity values, got {len(gravities)}")

    for index, board_gravity in enumerate(gravities):
        create_board(
            world,
            index,
            rows=rows,
            cols=cols,
            gravity=board_gravity,
            settings=replace(settings) if settings else None,
        )

    spawner = CellSpawner(rng=world.random, piece_size=piece_size)
    setattr(world, "spawner", spawner)
    setattr(world, "machines", [
        RoundStateMachine(world, event_bus, entity, spawner) for entity in board_entities(world)
    ])
    setattr(world, "versus", VersusSystem(world, event_bus, spawner))
    return world


def board_entities(world: World) -> List[int]:
    """Board entity ids ordered by board index."""
    return [entity for entity, _, _ in iter_boards(world)]
