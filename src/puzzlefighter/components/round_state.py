from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List

from puzzlefighter.components.cell import Cell
from puzzlefighter.constants import NORMAL_SPEED


class RoundPhase(Enum):
    INACTIVE = auto()
    ROUND_START = auto()
    COUNTERING = auto()
    PLAYING = auto()
    RESOLVING = auto()
    COMBINING = auto()
    SCORING = auto()
    ROUND_END = auto()
    WON = auto()
    LOST = auto()

    @property
    def terminal(self) -> bool:
        return self in (RoundPhase.INACTIVE, RoundPhase.WON, RoundPhase.LOST)


@dataclass(slots=True)
class RoundState:
    """Per-board round bookkeeping.

    ``clear_scores`` holds one entry per destroy pass that removed cells this
    round; ``cleared_cells`` the cells themselves, in removal order.
    """
    phase: RoundPhase = RoundPhase.ROUND_START
    round: int = 0
    score: int = 0
    speed: float = NORMAL_SPEED
    clear_scores: List[int] = field(default_factory=list)
    cleared_cells: List[Cell] = field(default_factory=list)
