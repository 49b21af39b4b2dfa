import itertools

import pytest

from examhall.errors import ValidationError
from examhall.layouts import generate_grid, group_by_bench, seat_label
from examhall.models import GridSeat


@pytest.mark.parametrize("rows, columns, seats_per_bench", [
    (1, 1, 1),
    (2, 3, 2),
    (5, 4, 3),
    (7, 1, 5),
    (60, 2, 1),
])
def test_grid_covers_every_position_once(rows, columns, seats_per_bench):
    grid = generate_grid(rows, columns, seats_per_bench)

    positions = [(s.row_number, s.column_number, s.seat_number) for s in grid]
    assert len(grid) == rows * columns * seats_per_bench
    assert len(set(positions)) == len(positions)
    assert set(positions) == set(itertools.product(
        range(1, rows + 1), range(1, columns + 1), range(1, seats_per_bench + 1)
    ))


def test_grid_is_generated_row_by_row():
    grid = generate_grid(2, 2, 2)
    assert [(s.row_number, s.column_number, s.seat_number) for s in grid[:4]] == [
        (1, 1, 1), (1, 1, 2), (1, 2, 1), (1, 2, 2)
    ]


@pytest.mark.parametrize("dims", [(0, 1, 1), (1, -2, 1), (1, 1, 0), (1.5, 1, 1), ("3", 1, 1), (True, 1, 1)])
def test_grid_rejects_non_positive_dimensions(dims):
    with pytest.raises(ValidationError):
        generate_grid(*dims)


def test_seat_label():
    assert seat_label(GridSeat(row_number=3, column_number=12, seat_number=2)) == "R3C12S2"


def test_group_by_bench_orders_seats_within_bench():
    seats = [
        GridSeat(1, 2, 2, id=1),
        GridSeat(1, 2, 1, id=2),
        GridSeat(2, 1, 1, id=3),
        GridSeat(1, 1, 1, id=4),
    ]

    grid = group_by_bench(seats, rows=2, columns=2)

    assert [[[s.id for s in bench] for bench in row] for row in grid] == [
        [[4], [2, 1]],
        [[3], []],
    ]
