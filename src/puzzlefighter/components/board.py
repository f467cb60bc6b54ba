from dataclasses import dataclass
from enum import Enum

from puzzlefighter.constants import (
    DROP_SPEED,
    MOVE_DELAY,
    NORMAL_SPEED,
    ROTATION_DELAY,
    SPAWN_COLUMN,
)


class Gravity(Enum):
    """Direction cells settle in. DOWN pulls toward the last row, UP toward row 0."""
    DOWN = 1
    UP = -1


@dataclass(slots=True)
class Board:
    rows: int
    cols: int
    gravity: Gravity = Gravity.DOWN
    index: int = 0

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Board dimensions must be positive, got {self.rows}x{self.cols}")


@dataclass(slots=True)
class BoardSettings:
    """Per-board tuning; defaults come from ``puzzlefighter.constants``."""
    spawn_column: int = SPAWN_COLUMN
    normal_speed: float = NORMAL_SPEED
    drop_speed: float = DROP_SPEED
    move_delay: float = MOVE_DELAY
    rotation_delay: float = ROTATION_DELAY
