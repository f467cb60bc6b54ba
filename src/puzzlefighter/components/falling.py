from dataclasses import dataclass


@dataclass(slots=True)
class Falling:
    """Tag: the CellBody on this entity has not reached its target yet."""
