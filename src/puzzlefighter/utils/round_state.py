from __future__ import annotations

from typing import Iterator, Tuple

from esper import World

from puzzlefighter.components.board import Board
from puzzlefighter.components.round_state import RoundPhase, RoundState
from puzzlefighter.events.bus import EVENT_ROUND_PHASE_CHANGED, EventBus


def set_round_phase(
    world: World,
    event_bus: EventBus,
    board_entity: int,
    phase: RoundPhase,
) -> bool:
    """Update a board's round phase and emit a change event when it differs."""

    state = world.component_for_entity(board_entity, RoundState)
    previous = state.phase
    if previous == phase:
        return False
    state.phase = phase
    event_bus.emit(
        EVENT_ROUND_PHASE_CHANGED,
        board=board_entity,
        previous=previous,
        phase=phase,
    )
    return True


def iter_boards(world: World) -> Iterator[Tuple[int, Board, RoundState]]:
    """Yield (entity, Board, RoundState) ordered by board index."""
    boards = sorted(world.get_components(Board, RoundState), key=lambda item: item[1][0].index)
    for entity, (board, state) in boards:
        yield entity, board, state


