from puzzlefighter.components.cell_grid import CellGrid
from puzzlefighter.systems import grid_ops
from tests.helpers import grid_from_rows


def test_empty_board_dump():
    grid = CellGrid(rows=12, cols=6)
    assert grid_ops.debug_rows(grid) == ["______"] * 12
    assert grid_ops.debug_string(grid) == "\n".join(["______"] * 12)


def test_dump_marks_bombs_upper_case_and_groups_with_g():
    grid = grid_from_rows([
        "______",
        "______",
        "______",
        "yy____",
        "yyB___",
        "bbrY__",
    ])
    grid_ops.on_fixed(grid)

    assert grid_ops.debug_rows(grid) == [
        "______",
        "______",
        "______",
        "gg____",
        "ggB___",
        "bbrY__",
    ]


def test_layout_round_trips_through_dump():
    rows = [
        "____",
        "_R__",
        "yb__",
        "rG_b",
    ]
    assert grid_ops.debug_rows(grid_from_rows(rows)) == rows
