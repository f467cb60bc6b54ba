from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional

from puzzlefighter.components.grid_position import GridPosition

if TYPE_CHECKING:
    from puzzlefighter.components.cell_group import CellGroup


class CellColor(Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"

    @property
    def letter(self) -> str:
        return self.value[0]


class CellKind(Enum):
    NORMAL = auto()
    BOMB = auto()
    COUNTER = auto()
    DIAMOND = auto()


@dataclass(slots=True, frozen=True)
class CellSpawn:
    """Generator output describing a cell to be created for a round."""
    color: CellColor
    kind: CellKind
    round_created: int


@dataclass(slots=True, eq=False)
class Cell:
    """A single playable unit on a board.

    Cells compare by identity. ``group`` is a non-owning back reference to the
    power group the cell currently belongs to; ``position`` always mirrors the
    slot the grid stores the cell in.
    """
    color: CellColor
    kind: CellKind = CellKind.NORMAL
    round_created: int = 0
    position: Optional[GridPosition] = None
    group: Optional[CellGroup] = None

    @classmethod
    def from_spawn(cls, spawn: CellSpawn) -> "Cell":
        return cls(color=spawn.color, kind=spawn.kind, round_created=spawn.round_created)

    @property
    def in_group(self) -> bool:
        return self.group is not None
