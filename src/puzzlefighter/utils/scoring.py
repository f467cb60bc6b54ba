"""Pure scoring helpers.

Every function here depends only on its arguments so identical clears always
produce identical scores.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from puzzlefighter.components.cell import Cell, CellKind
from puzzlefighter.constants import ALL_CLEAR_BONUS

SQUARES = (9, 16, 25, 36, 49, 64, 81, 100, 121, 144, 169, 196, 225)


def round_score(round_index: int, clear_scores: Sequence[int]) -> int:
    """Score for a whole round: every clear plus combo and time bonuses."""
    if not clear_scores:
        return 0
    return sum(clear_scores) + combo_bonus(len(clear_scores)) + time_bonus(round_index)


def combo_bonus(clear_count: int) -> int:
    # Two-hit combos take the general branch.
    if clear_count == 1:
        return 2
    if clear_count == 3:
        return 4
    return 4 + (clear_count - 3) * 6


def time_bonus(round_index: int) -> int:
    return round_index // 20


def cell_clear_score(cells: Iterable[Cell]) -> int:
    cells = list(cells)
    return total_cell_bonus(cells) + cell_bonus(cells)


def total_cell_bonus(cells: Iterable[Cell]) -> int:
    """+1 for every full ten non-bomb cells past the first (11-20 -> 1, 21-30 -> 2)."""
    count = sum(1 for cell in cells if cell.kind is not CellKind.BOMB)
    return (count - 1) // 10 if count > 0 else 0


def cell_bonus(cells: Iterable[Cell]) -> int:
    """Loose cells count once; grouped cells double, plus a size multiplier.

    The multiplier grows by 0.5 each time the grouped count passes one more
    than a perfect square (10, 17, 26, ...).
    """
    single = 0
    combined = 0
    for cell in cells:
        if cell.in_group:
            combined += 1
        else:
            single += 1
    if single == 0 and combined == 0:
        return 0
    index = len(SQUARES)
    for i, square in enumerate(SQUARES):
        if combined <= square + 1:
            index = i
            break
    multiplier = 0.5 * index
    combined = 2 * combined + int(round(multiplier * combined))
    return single + combined


def all_clear_bonus(live_cell_count: int) -> int:
    return ALL_CLEAR_BONUS if live_cell_count == 0 else 0
