import logging
from dataclasses import asdict, dataclass
from typing import Optional

from examhall.db_models import Hall, Seat
from examhall.layouts import seat_label

logger = logging.getLogger(__name__)

UNKNOWN_HALL = "Unknown"


@dataclass(frozen=True)
class AssignmentRecord:
    register_number: Optional[str]
    student_name: Optional[str]
    department: Optional[str]
    semester: Optional[str]
    hall_name: str
    seat_label: str

    def to_dict(self):
        return asdict(self)


def _register_number_key(record):
    # None sorts after every register number and keeps scan order among itself
    return (record.register_number is None, record.register_number or "")


def build_assignment_report(seats, hall_names):
    """
    One record per seat, sorted by register number.

    ``hall_names`` maps hall id to hall name; ids missing from it resolve to
    'Unknown'.
    """
    records = [
        AssignmentRecord(
            register_number=seat.register_number,
            student_name=seat.student_name,
            department=seat.department,
            semester=seat.semester,
            hall_name=hall_names.get(seat.hall_id, UNKNOWN_HALL),
            seat_label=seat_label(seat)
        )
        for seat in seats
    ]
    return sorted(records, key=_register_number_key)


def collect_assignment_report(db, department=None, semester=None):
    query = db.query(Seat).filter(Seat.is_assigned.is_(True))
    if department:
        query = query.filter(Seat.department == department)
    if semester:
        query = query.filter(Seat.semester == semester)
    seats = query.order_by(Seat.id).all()

    hall_ids = {seat.hall_id for seat in seats}
    hall_names = {}
    if hall_ids:
        hall_names = dict(db.query(Hall.id, Hall.name).filter(Hall.id.in_(hall_ids)).all())

    logger.debug("Assignment report: %d seats across %d halls", len(seats), len(hall_ids))
    return build_assignment_report(seats, hall_names)
