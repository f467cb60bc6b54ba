from __future__ import annotations

import random
from typing import Dict, List, Tuple

from puzzlefighter.components.cell import CellColor, CellKind, CellSpawn
from puzzlefighter.constants import PIECE_SIZE

SPAWNABLE_KINDS: Tuple[CellKind, ...] = (CellKind.NORMAL, CellKind.BOMB)
COLORS: Tuple[CellColor, ...] = tuple(CellColor)


class CellSpawner:
    """Shared cell generator for every board in a session.

    Each round index is generated once and cached, so every board (and every
    repeated request) sees the same sequence for that round.
    """

    def __init__(self, *, rng: random.Random | None = None, piece_size: int = PIECE_SIZE):
        if piece_size <= 0:
            raise ValueError(f"piece_size must be positive, got {piece_size}")
        self.rng = rng or random.Random()
        self.piece_size = piece_size
        self._spawned: Dict[int, Tuple[CellSpawn, ...]] = {}

    def request_cells_for_round(self, round_index: int) -> Tuple[CellSpawn, ...]:
        cached = self._spawned.get(round_index)
        if cached is not None:
            return cached
        cells = tuple(
            CellSpawn(
                color=self.rng.choice(COLORS),
                kind=self.rng.choice(SPAWNABLE_KINDS),
                round_created=round_index,
            )
            for _ in range(self.piece_size)
        )
        self._spawned[round_index] = cells
        return cells

    def counter_cells(self, round_index: int, amount: int) -> List[CellSpawn]:
        """Counter-kind specs for an attack of ``amount`` cells."""
        return [
            CellSpawn(color=self.rng.choice(COLORS), kind=CellKind.COUNTER, round_created=round_index)
            for _ in range(max(0, amount))
        ]

    def forget_before(self, round_index: int) -> None:
        """Drop cached rounds older than ``round_index``."""
        for key in [key for key in self._spawned if key < round_index]:
            del self._spawned[key]
