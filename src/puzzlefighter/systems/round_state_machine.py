from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Sequence, Tuple

from esper import World

from puzzlefighter.components.board import Board, BoardSettings
from puzzlefighter.components.cell import Cell, CellKind, CellSpawn
from puzzlefighter.components.cell_body import CellBody
from puzzlefighter.components.cell_grid import CellGrid
from puzzlefighter.components.falling import Falling
from puzzlefighter.components.grid_position import GridPosition
from puzzlefighter.components.pending_counter import PendingCounter
from puzzlefighter.components.round_state import RoundPhase, RoundState
from puzzlefighter.events.bus import (
    EVENT_BOARD_LOST,
    EVENT_CELLS_CLEARED,
    EVENT_CELLS_FIXED,
    EVENT_CELLS_SPAWNED,
    EVENT_GROUPS_COMBINED,
    EVENT_ROUND_SCORED,
    EVENT_TICK,
    EventBus,
)
from puzzlefighter.systems import grid_ops
from puzzlefighter.systems.cell_spawner import CellSpawner
from puzzlefighter.utils.round_state import set_round_phase
from puzzlefighter.utils.scoring import cell_clear_score, round_score

logger = logging.getLogger(__name__)


class RoundStateMachine:
    """Drives one board through its round lifecycle, one phase per tick.

    The board entity holds the authoritative ``CellGrid``; the machine keeps
    one ``CellBody`` entity per visible cell (the alive set) and tags those
    still travelling toward their grid slot with ``Falling``. Input reaches
    the board through :meth:`drop`, :meth:`move_horizontal` and
    :meth:`rotate`, which only act while the board is ``PLAYING`` and return
    the delay before the same input should be accepted again.
    """

    def __init__(self, world: World, event_bus: EventBus, board_entity: int, spawner: CellSpawner):
        self.world = world
        self.event_bus = event_bus
        self.board_entity = board_entity
        self.spawner = spawner
        self._handlers: Dict[RoundPhase, Callable[[float], None]] = {
            RoundPhase.ROUND_START: self._round_start,
            RoundPhase.COUNTERING: self._countering,
            RoundPhase.PLAYING: self._playing,
            RoundPhase.RESOLVING: self._resolving,
            RoundPhase.COMBINING: self._combining,
            RoundPhase.SCORING: self._scoring,
            RoundPhase.ROUND_END: self._round_end,
        }
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    # ------------------------------------------------------------------
    # Component access
    # ------------------------------------------------------------------
    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    @property
    def settings(self) -> BoardSettings:
        return self.world.component_for_entity(self.board_entity, BoardSettings)

    @property
    def grid(self) -> CellGrid:
        return self.world.component_for_entity(self.board_entity, CellGrid)

    @property
    def state(self) -> RoundState:
        return self.world.component_for_entity(self.board_entity, RoundState)

    @property
    def pending(self) -> PendingCounter:
        return self.world.component_for_entity(self.board_entity, PendingCounter)

    def bodies(self) -> List[Tuple[int, CellBody]]:
        """Alive set: this board's proxies in creation order."""
        owned = [
            (ent, body) for ent, body in self.world.get_component(CellBody)
            if body.board == self.board_entity
        ]
        owned.sort(key=lambda item: item[0])
        return owned

    def falling(self) -> List[Tuple[int, CellBody]]:
        return [(ent, body) for ent, body in self.bodies() if self.world.has_component(ent, Falling)]

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------
    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 0.0)
        try:
            dt = float(dt)
        except (TypeError, ValueError):
            return
        self.tick(dt)

    def tick(self, dt: float) -> None:
        phase = self.state.phase
        if phase.terminal:
            return
        self._handlers[phase](dt)

    def _set_phase(self, phase: RoundPhase) -> None:
        set_round_phase(self.world, self.event_bus, self.board_entity, phase)

    def _round_start(self, dt: float) -> None:
        state = self.state
        state.clear_scores = []
        state.cleared_cells = []
        if self.pending.batches:
            self._set_phase(RoundPhase.COUNTERING)
            return
        if self._spawn_player_cells():
            self._set_phase(RoundPhase.PLAYING)

    def _countering(self, dt: float) -> None:
        if self._spawn_counter_cells(self.pending.drain()):
            self._set_phase(RoundPhase.PLAYING)

    def _playing(self, dt: float) -> None:
        self._make_fixed()
        if not self.falling():
            self._set_phase(RoundPhase.RESOLVING)
        else:
            self._move_active(dt)

    def _resolving(self, dt: float) -> None:
        self._make_fixed()
        if self._resolve():
            self._set_phase(RoundPhase.COMBINING)
        self._move_active(dt)

    def _combining(self, dt: float) -> None:
        grid = self.grid
        dropped = 0
        for ent, body in self.bodies():
            group = body.cell.group
            if group is None:
                continue
            if group.representative is not body.cell or not grid.group_exists(group):
                self.world.delete_entity(ent, immediate=True)
                dropped += 1
                continue
            body.row, body.col = group.center()
        self.event_bus.emit(
            EVENT_GROUPS_COMBINED,
            board=self.board_entity,
            groups=grid.live_groups(),
            dropped=dropped,
        )
        self._set_phase(RoundPhase.SCORING)

    def _scoring(self, dt: float) -> None:
        state = self.state
        delta = round_score(state.round, state.clear_scores)
        state.score += delta
        all_clear = bool(state.cleared_cells) and not self.grid.live_cells()
        self.event_bus.emit(
            EVENT_ROUND_SCORED,
            board=self.board_entity,
            round=state.round,
            delta=delta,
            score=state.score,
            all_clear=all_clear,
        )
        self._set_phase(RoundPhase.ROUND_END)

    def _round_end(self, dt: float) -> None:
        self.state.round += 1
        self._set_phase(RoundPhase.ROUND_START)

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------
    def _entry_row(self, depth: int) -> int:
        """Row ``depth`` steps above the top edge of the board."""
        grid = self.grid
        return grid.top_row - grid.down * depth

    def _spawn_player_cells(self) -> bool:
        state = self.state
        specs = self.spawner.request_cells_for_round(state.round)
        col = self.settings.spawn_column
        count = len(specs)
        cells: List[Cell] = []
        # Last element first so it lands lowest.
        for i in range(count - 1, -1, -1):
            cell = self._create_body(specs[i], self._entry_row(count - i), col)
            if cell is None:
                return False
            cells.append(cell)
        self._after_spawn(cells, "player")
        return True

    def _spawn_counter_cells(self, specs: Sequence[CellSpawn]) -> bool:
        grid = self.grid
        depth_by_col: Dict[int, int] = {}
        cells: List[Cell] = []
        for i, spec in enumerate(specs):
            col = i % grid.cols
            depth_by_col[col] = depth_by_col.get(col, 0) + 1
            cell = self._create_body(spec, self._entry_row(depth_by_col[col]), col)
            if cell is None:
                return False
            cells.append(cell)
        self._after_spawn(cells, "counter")
        return True

    def _create_body(self, spec: CellSpawn, row: int, col: int) -> Cell | None:
        cell = Cell.from_spawn(spec)
        if not grid_ops.add_cell(self.grid, cell, col):
            self._lose()
            return None
        self.world.create_entity(
            CellBody(board=self.board_entity, cell=cell, row=float(row), col=float(col)),
            Falling(),
        )
        return cell

    def _after_spawn(self, cells: List[Cell], source: str) -> None:
        self.event_bus.emit(
            EVENT_CELLS_SPAWNED,
            board=self.board_entity,
            round=self.state.round,
            cells=cells,
            source=source,
        )
        self._log_grid("spawn")

    def _lose(self) -> None:
        state = self.state
        logger.info("Board %s lost in round %s", self.board.index, state.round)
        self._set_phase(RoundPhase.LOST)
        self.event_bus.emit(EVENT_BOARD_LOST, board=self.board_entity, round=state.round)

    def _log_grid(self, reason: str) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Board %s after %s:\n%s", self.board.index, reason, grid_ops.debug_string(self.grid))

    # ------------------------------------------------------------------
    # Movement and resolution
    # ------------------------------------------------------------------
    def target_for(self, body: CellBody) -> Tuple[float, float]:
        cell = body.cell
        group = cell.group
        if group is not None and group.representative is cell:
            return group.center()
        return float(cell.position.row), float(cell.position.col)

    def _make_fixed(self) -> None:
        fixed: List[Cell] = []
        for ent, body in self.falling():
            if (body.row, body.col) == self.target_for(body):
                self.world.remove_component(ent, Falling)
                fixed.append(body.cell)
        if fixed:
            self.event_bus.emit(EVENT_CELLS_FIXED, board=self.board_entity, cells=fixed)
        if not self.falling() and grid_ops.on_fixed(self.grid).changed:
            self._log_grid("settle")

    def _move_active(self, dt: float) -> None:
        step = self.state.speed * dt
        for _, body in self.falling():
            body.row, body.col = move_towards((body.row, body.col), self.target_for(body), step)

    def _make_falling(self) -> None:
        for ent, body in self.bodies():
            if (body.row, body.col) != self.target_for(body) and not self.world.has_component(ent, Falling):
                self.world.add_component(ent, Falling())

    def _resolve(self) -> bool:
        """One cascade step. True once nothing is left falling."""
        if self.falling():
            return False
        grid = self.grid
        state = self.state
        cleared = grid_ops.destroy_connected(grid)
        if cleared:
            score = cell_clear_score(cleared)
            state.clear_scores.append(score)
            state.cleared_cells.extend(cleared)
            self.event_bus.emit(
                EVENT_CELLS_CLEARED,
                board=self.board_entity,
                round=state.round,
                cells=cleared,
                score=score,
            )
        for ent, body in self.bodies():
            if not grid.cell_exists(body.cell):
                self.world.delete_entity(ent, immediate=True)
        self._make_falling()
        return not self.falling()

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------
    def visual_row(self, body: CellBody) -> int:
        """Grid row the proxy currently overlaps on its way down."""
        if self.grid.down > 0:
            return math.ceil(body.row)
        return math.floor(body.row)

    def drop(self, accelerate: bool) -> float:
        if self.state.phase is RoundPhase.PLAYING:
            settings = self.settings
            self.state.speed = settings.drop_speed if accelerate else settings.normal_speed
        return 0.0

    def move_horizontal(self, delta: float) -> float:
        if self.state.phase is not RoundPhase.PLAYING or delta == 0:
            return 0.0
        direction = -1 if delta < 0 else 1
        falling = self.falling()
        if not falling:
            return 0.0
        grid = self.grid
        moving = {body.cell for _, body in falling}
        for _, body in falling:
            pos = GridPosition(self.visual_row(body), body.cell.position.col + direction)
            occupant = grid.cell_at(pos.row, pos.col)
            if not (grid.is_clear(pos) or occupant in moving):
                return 0.0
        if not grid_ops.shift_horizontal(grid, [body.cell for _, body in falling], direction):
            return 0.0
        for _, body in falling:
            body.col += direction
        self._log_grid("shift")
        return self.settings.move_delay

    def rotate(self, direction: int) -> float:
        if self.state.phase is not RoundPhase.PLAYING:
            return 0.0
        falling = self.falling()
        if len(falling) < 2:
            return 0.0
        (_, lever), (_, pivot) = falling[0], falling[1]
        # Counter drops are not a piece; they only fall.
        if CellKind.COUNTER in (lever.cell.kind, pivot.cell.kind):
            return 0.0
        lever_pos = GridPosition(self.visual_row(lever), lever.cell.position.col)
        pivot_pos = GridPosition(self.visual_row(pivot), pivot.cell.position.col)
        result = grid_ops.rotate_cells(
            self.grid, lever.cell, lever_pos, pivot.cell, pivot_pos, clockwise=direction < 0
        )
        if result is None:
            return 0.0
        new_lever, new_pivot = result
        lever.row = pivot.row + (new_lever.row - pivot_pos.row)
        lever.col = float(new_lever.col)
        pivot.col = float(new_pivot.col)
        self._log_grid("rotate")
        return self.settings.rotation_delay


def move_towards(current: Tuple[float, float], target: Tuple[float, float], max_step: float) -> Tuple[float, float]:
    """Step from ``current`` toward ``target`` by at most ``max_step`` without overshooting."""
    dr = target[0] - current[0]
    dc = target[1] - current[1]
    distance = math.hypot(dr, dc)
    if distance <= max_step or distance == 0.0:
        return target
    scale = max_step / distance
    return current[0] + dr * scale, current[1] + dc * scale
