from puzzlefighter.components.cell import CellColor, CellKind
from puzzlefighter.systems import grid_ops
from puzzlefighter.utils.scoring import cell_clear_score
from tests.helpers import grid_from_rows


def test_bomb_clears_connected_component():
    grid = grid_from_rows([
        "____",
        "____",
        "r___",
        "Rrb_",
    ])
    doomed = [grid.cell_at(3, 0), grid.cell_at(3, 1), grid.cell_at(2, 0)]
    survivor = grid.cell_at(3, 2)

    cleared = grid_ops.destroy_connected(grid)

    assert set(cleared) == set(doomed)
    assert all(not grid.cell_exists(cell) for cell in doomed)
    assert grid.cell_exists(survivor)
    assert grid_ops.debug_rows(grid) == ["____", "____", "____", "__b_"]


def test_lone_bomb_is_not_destroyed():
    grid = grid_from_rows([
        "____",
        "____",
        "____",
        "R_b_",
    ])

    assert grid_ops.destroy_connected(grid) == []
    assert len(grid.live_cells()) == 2


def test_counter_cells_block_the_fill():
    grid = grid_from_rows([
        "____",
        "____",
        "____",
        "R1r_",
    ])

    assert grid_ops.destroy_connected(grid) == []
    assert len(grid.live_cells()) == 3


def test_counter_cells_survive_next_to_a_chain():
    grid = grid_from_rows([
        "____",
        "____",
        "r___",
        "R1__",
    ])
    counter = grid.cell_at(3, 1)

    cleared = grid_ops.destroy_connected(grid)

    assert len(cleared) == 2
    assert all(cell.kind is not CellKind.COUNTER for cell in cleared)
    assert grid.cell_exists(counter)
    assert grid_ops.debug_rows(grid) == ["____", "____", "____", "_r__"]


def test_overlapping_chains_are_collected_before_removal():
    grid = grid_from_rows([
        "____",
        "____",
        "Bb__",
        "rRb_",
    ])
    survivor = grid.cell_at(3, 2)

    cleared = grid_ops.destroy_connected(grid)

    assert len(cleared) == 4
    assert {cell.color for cell in cleared} == {CellColor.RED, CellColor.BLUE}
    assert grid.live_cells() == [survivor]


def test_two_bombs_in_one_chain_are_cleared_once():
    grid = grid_from_rows([
        "____",
        "____",
        "____",
        "RrR_",
    ])

    cleared = grid_ops.destroy_connected(grid)

    assert len(cleared) == 3
    assert len(set(cleared)) == 3


def test_cells_above_a_clear_fall_into_the_gap():
    grid = grid_from_rows([
        "____",
        "b___",
        "r___",
        "Rg__",
    ])

    grid_ops.destroy_connected(grid)

    assert grid_ops.debug_rows(grid) == ["____", "____", "____", "bg__"]


def test_destroying_grouped_cells_drops_the_group():
    grid = grid_from_rows([
        "____",
        "rr__",
        "rr__",
        "Rb__",
    ])
    grid_ops.on_fixed(grid)
    assert len(grid.live_groups()) == 1

    cleared = grid_ops.destroy_connected(grid)

    assert len(cleared) == 5
    assert grid.live_groups() == []
    # Cleared cells keep their group so scoring can tell them apart.
    assert sum(1 for cell in cleared if cell.in_group) == 4
    assert cell_clear_score(cleared) == 9
    assert grid_ops.debug_rows(grid) == ["____", "____", "____", "_b__"]
