from dataclasses import dataclass

from puzzlefighter.components.cell import Cell


@dataclass(slots=True)
class CellBody:
    """Moving proxy for a live cell (or a whole group, once combined).

    ``row``/``col`` are float grid coordinates; rows above the board are
    negative for downward gravity. Renderers key their visuals on the entity
    carrying this component.
    """
    board: int
    cell: Cell
    row: float
    col: float
