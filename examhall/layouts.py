from examhall.errors import ValidationError
from examhall.models import GridSeat


def _require_positive(name, value):
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")


def generate_grid(rows, columns, seats_per_bench):
    """Every (row, column, seat) position of a hall, generated row by row."""
    _require_positive("rows", rows)
    _require_positive("columns", columns)
    _require_positive("seats_per_bench", seats_per_bench)

    seats = []
    for row in range(1, rows + 1):
        for column in range(1, columns + 1):
            for seat in range(1, seats_per_bench + 1):
                seats.append(
                    GridSeat(
                        row_number=row,
                        column_number=column,
                        seat_number=seat
                    )
                )

    return seats


def seat_label(seat):
    return f"R{seat.row_number}C{seat.column_number}S{seat.seat_number}"


def group_by_bench(seats, rows, columns):
    """
    Lay seats out as ``rows`` lists of ``columns`` benches, each bench holding
    its seats ordered by seat number. Missing benches come back empty.
    """
    benches = {}
    for seat in seats:
        benches.setdefault((seat.row_number, seat.column_number), []).append(seat)

    grid = []
    for row in range(1, rows + 1):
        grid.append([
            sorted(benches.get((row, column), []), key=lambda s: s.seat_number)
            for column in range(1, columns + 1)
        ])
    return grid
