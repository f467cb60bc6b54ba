from __future__ import annotations

import logging
from typing import List

from esper import World

from puzzlefighter.components.cell_grid import CellGrid
from puzzlefighter.components.pending_counter import PendingCounter
from puzzlefighter.components.round_state import RoundPhase
from puzzlefighter.events.bus import (
    EVENT_ATTACK_SENT,
    EVENT_BOARD_LOST,
    EVENT_BOARD_WON,
    EVENT_COUNTER_QUEUED,
    EVENT_ROUND_SCORED,
    EventBus,
)
from puzzlefighter.systems.cell_spawner import CellSpawner
from puzzlefighter.utils.round_state import iter_boards, set_round_phase
from puzzlefighter.utils.scoring import all_clear_bonus

logger = logging.getLogger(__name__)


class VersusSystem:
    """Routes attacks between boards and declares the last board standing."""

    def __init__(self, world: World, event_bus: EventBus, spawner: CellSpawner):
        self.world = world
        self.event_bus = event_bus
        self.spawner = spawner
        self.event_bus.subscribe(EVENT_ROUND_SCORED, self.on_round_scored)
        self.event_bus.subscribe(EVENT_BOARD_LOST, self.on_board_lost)

    def _playing_boards(self) -> List[int]:
        return [ent for ent, _, state in iter_boards(self.world) if not state.phase.terminal]

    def on_round_scored(self, sender, **kwargs):
        source = kwargs.get('board')
        delta = kwargs.get('delta') or 0
        round_index = kwargs.get('round', 0)
        self._forget_passed_rounds()
        if source is None or delta <= 0:
            return
        try:
            grid = self.world.component_for_entity(source, CellGrid)
        except KeyError:
            return
        amount = delta + all_clear_bonus(len(grid.live_cells()))
        for target in self._playing_boards():
            if target == source:
                continue
            self.send_attack(source, target, amount, round_index)

    def _forget_passed_rounds(self) -> None:
        """Drop spawner rounds every playing board has already been dealt."""
        rounds = [state.round for _, _, state in iter_boards(self.world) if not state.phase.terminal]
        if rounds:
            self.spawner.forget_before(min(rounds))

    def send_attack(self, source: int, target: int, amount: int, round_index: int) -> None:
        pending = self.world.component_for_entity(target, PendingCounter)
        pending.batches.append(self.spawner.counter_cells(round_index, amount))
        self.event_bus.emit(EVENT_ATTACK_SENT, source=source, target=target, amount=amount)
        self.event_bus.emit(
            EVENT_COUNTER_QUEUED,
            board=target,
            count=sum(len(batch) for batch in pending.batches),
        )

    def on_board_lost(self, sender, **kwargs):
        boards = list(iter_boards(self.world))
        if len(boards) < 2:
            return
        remaining = self._playing_boards()
        if len(remaining) != 1:
            return
        winner = remaining[0]
        set_round_phase(self.world, self.event_bus, winner, RoundPhase.WON)
        logger.info("Board %s won", winner)
        self.event_bus.emit(EVENT_BOARD_WON, board=winner)
