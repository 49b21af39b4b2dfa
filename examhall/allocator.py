import logging
import re

from examhall.errors import ValidationError
from examhall.models import (
    HORIZONTAL,
    VERTICAL,
    RosterSlice,
    SeatMutation,
    SeatOccupancy,
    SequentialPattern,
)

logger = logging.getLogger(__name__)

TRAILING_DIGITS = re.compile(r"[0-9]+$")


def _horizontal_key(seat):
    return (seat.row_number, seat.column_number, seat.seat_number)


def _vertical_key(seat):
    return (seat.column_number, seat.row_number, seat.seat_number)


ORDER_KEYS = {
    HORIZONTAL: _horizontal_key,
    VERTICAL: _vertical_key,
}


def order_seats(seats, order):
    """Sort seats row by row (horizontal) or column by column (vertical)."""
    try:
        key = ORDER_KEYS[order]
    except KeyError:
        raise ValidationError(f"Unknown seat order: {order!r}") from None
    return sorted(seats, key=key)


def increment_register_number(starting, offset):
    """
    Add ``offset`` to the trailing digit run of ``starting``, keeping its width.

    >>> increment_register_number("007", 2)
    '009'
    >>> increment_register_number("CS099", 1)
    'CS100'

    A value without trailing digits is returned unchanged.
    """
    match = TRAILING_DIGITS.search(starting)
    if match is None:
        return starting

    digits = match.group()
    number = int(digits) + offset
    return starting[:match.start()] + str(number).zfill(len(digits))


def select_roster(source):
    """The students a RosterSlice pairs with, in pairing order."""
    if source.start < 1 or source.end < 0:
        raise ValidationError(f"Invalid student range [{source.start}, {source.end}]")

    excluded = set(source.excluded_register_numbers)
    available = [
        student for student in source.students
        if (not source.department or student.department == source.department)
        and (not source.semester or student.semester == source.semester)
        and student.register_number not in excluded
    ]
    available.sort(key=lambda s: s.register_number)

    if source.end < source.start:
        return []
    return available[source.start - 1:source.end]


def _sequential_occupancies(source, count):
    starting = (source.starting_register_number or "").strip()
    if not starting:
        raise ValidationError("A starting register number is required")

    return [
        SeatOccupancy(
            register_number=increment_register_number(starting, index),
            student_name=source.student_name or None,
            department=source.department or None,
            semester=source.semester or None
        )
        for index in range(count)
    ]


def _roster_occupancies(source, count):
    students = select_roster(source)

    occupancies = []
    for index in range(count):
        if index >= len(students):
            occupancies.append(None)
            continue

        student = students[index]
        occupancies.append(
            SeatOccupancy(
                register_number=student.register_number,
                student_name=student.name,
                department=student.department,
                semester=student.semester
            )
        )
    return occupancies


def allocate(selected_seats, order, source):
    """
    Pair the selected seats with students and return one SeatMutation per seat.

    Seats are ordered with ``order`` first; the Nth ordered seat then receives
    the Nth value of ``source``. Roster seats left over once the slice runs out
    get a clearing mutation. Nothing is written to storage here.
    """
    if not selected_seats:
        raise ValidationError("Select at least one seat")

    seat_ids = [seat.id for seat in selected_seats if seat.id is not None]
    if len(seat_ids) != len(set(seat_ids)):
        raise ValidationError("The same seat was selected more than once")

    ordered = order_seats(selected_seats, order)

    if isinstance(source, SequentialPattern):
        occupancies = _sequential_occupancies(source, len(ordered))
    elif isinstance(source, RosterSlice):
        occupancies = _roster_occupancies(source, len(ordered))
    else:
        raise ValidationError(f"Unsupported student source: {type(source).__name__}")

    mutations = [
        SeatMutation(seat_id=seat.id, occupancy=occupancy)
        for seat, occupancy in zip(ordered, occupancies)
    ]

    logger.debug(
        "Allocated %d of %d seats (%s)",
        sum(1 for m in mutations if m.is_assigned), len(mutations), order
    )
    return mutations
