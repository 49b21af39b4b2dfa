"""
Parse pasted student lists.

Two line formats are accepted:

* batch format, ``name, register_number`` — department and semester come from
  the batch being imported;
* roster format, ``register_number, name, department, semester[, class_section]``.
"""
import io

import pandas as pd

from examhall.errors import ValidationError
from examhall.models import RosterStudent

BATCH_COLUMNS = ["name", "register_number"]
ROSTER_COLUMNS = ["register_number", "name", "department", "semester", "class_section"]


def _read_lines(text, columns):
    """A frame of the non-blank lines, indexed by their 1-based line number."""
    lines = [
        (number, line)
        for number, line in enumerate((text or "").splitlines(), start=1)
        if line.strip()
    ]
    if not lines:
        raise ValidationError("No student data provided")

    try:
        df = pd.read_csv(
            io.StringIO("\n".join(line for _, line in lines)),
            header = None,
            names = columns + ["_extra"],
            index_col = False,
            dtype = str,
            keep_default_na = False,
            skipinitialspace = True
        )
    except pd.errors.ParserError as e:
        raise ValidationError(f"Could not parse student data: {e}") from None

    df = df.fillna("")
    for column in df.columns:
        df[column] = df[column].str.strip()
    df.index = [number for number, _ in lines]

    overlong = df.index[df["_extra"] != ""].tolist()
    if overlong:
        raise ValidationError(f"Line {overlong[0]}: expected at most {len(columns)} fields")
    return df[columns]


def parse_batch(text, department, semester):
    """Students from ``name, register_number`` lines, all in one department/semester."""
    if not department or not semester:
        raise ValidationError("Department and semester are required for a batch import")

    df = _read_lines(text, BATCH_COLUMNS)

    students = []
    for line, row in df.iterrows():
        if not row["name"] or not row["register_number"]:
            raise ValidationError(f"Line {line}: expected 'name, register number'")

        students.append(
            RosterStudent(
                register_number = row["register_number"],
                name = row["name"],
                department = department,
                semester = semester
            )
        )

    return students


def parse_roster(text):
    df = _read_lines(text, ROSTER_COLUMNS)

    students = []
    for line, row in df.iterrows():
        missing = [c for c in ROSTER_COLUMNS[:4] if not row[c]]
        if missing:
            raise ValidationError(f"Line {line}: missing {', '.join(missing)}")

        students.append(
            RosterStudent(
                register_number = row["register_number"],
                name = row["name"],
                department = row["department"],
                semester = row["semester"],
                class_section = row["class_section"] or None
            )
        )

    return students
