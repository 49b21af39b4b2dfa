from types import SimpleNamespace

from examhall import repository
from examhall.models import HORIZONTAL, SequentialPattern
from examhall.reports import build_assignment_report, collect_assignment_report


def seat(hall_id, row, column, number, register_number, department="CSE", semester="S3"):
    return SimpleNamespace(
        hall_id=hall_id,
        row_number=row,
        column_number=column,
        seat_number=number,
        register_number=register_number,
        student_name=f"Name {register_number}" if register_number else None,
        department=department,
        semester=semester,
        is_assigned=register_number is not None
    )


def test_report_sorts_by_register_number_and_labels_seats():
    seats = [
        seat(1, 2, 3, 1, "B002"),
        seat(2, 1, 1, 2, "A001"),
        seat(1, 1, 2, 1, "B001"),
    ]

    records = build_assignment_report(seats, {1: "Alpha", 2: "Beta"})

    assert [r.register_number for r in records] == ["A001", "B001", "B002"]
    assert [r.hall_name for r in records] == ["Beta", "Alpha", "Alpha"]
    assert [r.seat_label for r in records] == ["R1C1S2", "R1C2S1", "R2C3S1"]


def test_report_keeps_scan_order_for_missing_register_numbers():
    seats = [
        seat(1, 1, 1, 1, None),
        seat(1, 1, 2, 1, "Z9"),
        seat(1, 1, 3, 1, None),
        seat(1, 1, 4, 1, "A1"),
    ]

    records = build_assignment_report(seats, {1: "Alpha"})

    assert [(r.register_number, r.seat_label) for r in records] == [
        ("A1", "R1C4S1"),
        ("Z9", "R1C2S1"),
        (None, "R1C1S1"),
        (None, "R1C3S1"),
    ]


def test_report_names_unknown_halls():
    records = build_assignment_report([seat(42, 1, 1, 1, "X1")], {})
    assert records[0].hall_name == "Unknown"


def test_record_as_dict():
    record = build_assignment_report([seat(1, 4, 5, 2, "X1")], {1: "Alpha"})[0]
    assert record.to_dict() == {
        "register_number": "X1",
        "student_name": "Name X1",
        "department": "CSE",
        "semester": "S3",
        "hall_name": "Alpha",
        "seat_label": "R4C5S2",
    }


def _assign(db, hall, starting, department, semester, count):
    seats = repository.fetch_seats(db, hall.id)[:count]
    repository.allocate_hall_seats(
        db, hall.id, [s.id for s in seats], HORIZONTAL,
        SequentialPattern(starting, student_name="Someone", department=department, semester=semester)
    )


def test_collect_report_across_halls_with_filter(db):
    alpha = repository.create_hall_with_grid(db, "Alpha", 2, 2, 1)
    beta = repository.create_hall_with_grid(db, "Beta", 1, 3, 2)

    _assign(db, alpha, "CS010", "CSE", "S3", 2)
    _assign(db, beta, "CS001", "CSE", "S3", 3)
    repository.allocate_hall_seats(
        db, beta.id, [repository.fetch_seats(db, beta.id)[-1].id], HORIZONTAL,
        SequentialPattern("EC001", department="ECE", semester="S3")
    )

    records = collect_assignment_report(db, department="CSE")

    assert [r.register_number for r in records] == ["CS001", "CS002", "CS003", "CS010", "CS011"]
    assert [r.hall_name for r in records] == ["Beta", "Beta", "Beta", "Alpha", "Alpha"]
    assert [r.seat_label for r in records] == ["R1C1S1", "R1C1S2", "R1C2S1", "R1C1S1", "R1C2S1"]

    ece = collect_assignment_report(db, department="ECE", semester="S3")
    assert [(r.register_number, r.hall_name, r.seat_label) for r in ece] == [("EC001", "Beta", "R1C3S2")]

    assert len(collect_assignment_report(db)) == 6
    assert collect_assignment_report(db, semester="S8") == []
