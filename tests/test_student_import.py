import pytest

from examhall.errors import ValidationError
from examhall.models import RosterStudent
from examhall.student_import import parse_batch, parse_roster


def test_parse_batch_applies_department_and_semester():
    text = "Asha Menon, 22CS001\n\n  Ravi Kumar ,22CS002  \n"

    students = parse_batch(text, "CSE", "S3")

    assert students == [
        RosterStudent("22CS001", "Asha Menon", "CSE", "S3"),
        RosterStudent("22CS002", "Ravi Kumar", "CSE", "S3"),
    ]


def test_parse_batch_keeps_leading_zeros():
    students = parse_batch("Zero, 007", "CSE", "S1")
    assert students[0].register_number == "007"


def test_parse_batch_reports_line_of_missing_register_number():
    with pytest.raises(ValidationError) as e:
        parse_batch("Asha, 22CS001\n\nRavi\n", "CSE", "S3")
    assert "Line 3" in e.value.detail


def test_parse_batch_rejects_extra_fields():
    with pytest.raises(ValidationError) as e:
        parse_batch("Asha, 22CS001, CSE", "CSE", "S3")
    assert "Line 1" in e.value.detail


def test_parse_batch_needs_department_and_semester():
    with pytest.raises(ValidationError):
        parse_batch("Asha, 22CS001", "CSE", "")


@pytest.mark.parametrize("text", ["", "  \n \n"])
def test_empty_input_is_rejected(text):
    with pytest.raises(ValidationError):
        parse_roster(text)


def test_parse_roster_with_optional_section():
    text = "22CS001, Asha, CSE, S3, A\n22EC004, Ravi, ECE, S5\n"

    students = parse_roster(text)

    assert students == [
        RosterStudent("22CS001", "Asha", "CSE", "S3", "A"),
        RosterStudent("22EC004", "Ravi", "ECE", "S5", None),
    ]


def test_parse_roster_reports_missing_fields():
    with pytest.raises(ValidationError) as e:
        parse_roster("22CS001, Asha, CSE, S3\n22CS002, Ravi\n")
    assert "Line 2" in e.value.detail
    assert "department" in e.value.detail
