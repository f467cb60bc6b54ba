from dataclasses import dataclass, field
from typing import List

from puzzlefighter.components.cell import CellSpawn


@dataclass(slots=True)
class PendingCounter:
    """Counter-attack batches queued by opponents, dropped at the next round start."""
    batches: List[List[CellSpawn]] = field(default_factory=list)

    def drain(self) -> List[CellSpawn]:
        specs = [spec for batch in self.batches for spec in batch]
        self.batches.clear()
        return specs
