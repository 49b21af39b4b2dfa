"""
Storage reads and writes over a SQLAlchemy session.

Every write commits once, so a hall and its grid, a cascade delete, or a batch
of seat mutations either land together or not at all.
"""
import logging
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from examhall import allocator
from examhall.db_models import Hall, Seat, Student, Department, utcnow
from examhall.errors import ConflictError, NotFoundError, PartialBulkFailure, ValidationError
from examhall.layouts import generate_grid
from examhall.models import RosterSlice, RosterStudent, SeatMutation

logger = logging.getLogger(__name__)


def _commit(db, action):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Rolled back %s", action)
        raise


# Halls

def list_halls(db):
    return db.query(Hall).order_by(Hall.created_at.desc(), Hall.id.desc()).all()


def get_hall(db, hall_id):
    hall = db.query(Hall).filter(Hall.id == hall_id).first()
    if not hall:
        raise NotFoundError(f"Hall {hall_id} not found")
    return hall


def create_hall_with_grid(db, name, rows, columns, seats_per_bench):
    name = (name or "").strip()
    if not name:
        raise ValidationError("Hall name is required")

    grid = generate_grid(rows, columns, seats_per_bench)

    hall = Hall(name=name, rows=rows, columns=columns, seats_per_bench=seats_per_bench)
    db.add(hall)
    try:
        db.flush()
        db.add_all([
            Seat(
                hall_id=hall.id,
                row_number=position.row_number,
                column_number=position.column_number,
                seat_number=position.seat_number,
                is_assigned=False
            )
            for position in grid
        ])
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Rolled back creation of hall %r", name)
        raise
    _commit(db, f"creation of hall {name!r}")
    db.refresh(hall)

    logger.info("Created hall %s (%r) with %d seats", hall.id, hall.name, len(grid))
    return hall


def delete_hall_cascade(db, hall_id):
    hall = get_hall(db, hall_id)
    db.query(Seat).filter(Seat.hall_id == hall.id).delete(synchronize_session=False)
    db.delete(hall)
    _commit(db, f"deletion of hall {hall_id}")
    logger.info("Deleted hall %s and its seats", hall_id)


# Seats

def fetch_seats(db, hall_id):
    get_hall(db, hall_id)
    return (
        db.query(Seat)
        .filter(Seat.hall_id == hall_id)
        .order_by(Seat.row_number, Seat.column_number, Seat.seat_number)
        .all()
    )


def fetch_assigned_register_numbers(db):
    rows = (
        db.query(Seat.register_number)
        .filter(Seat.is_assigned.is_(True))
        .filter(Seat.register_number.isnot(None))
        .all()
    )
    return [r.register_number for r in rows]


def _seats_by_id(db, hall_id, seat_ids):
    seats = db.query(Seat).filter(Seat.hall_id == hall_id).filter(Seat.id.in_(seat_ids)).all()
    found = {seat.id: seat for seat in seats}
    missing = sorted(set(seat_ids) - set(found))
    if missing:
        raise NotFoundError(f"Seats {missing} do not belong to hall {hall_id}")
    return found


def apply_seat_mutations(db, hall_id, mutations):
    """Write a batch of SeatMutations; unknown seat ids reject the whole batch."""
    hall = get_hall(db, hall_id)
    seats = _seats_by_id(db, hall.id, [m.seat_id for m in mutations])

    for mutation in mutations:
        seats[mutation.seat_id].occupy(mutation.occupancy)

    hall.updated_at = utcnow()
    _commit(db, f"seat update of hall {hall_id}")
    logger.info("Updated %d seats in hall %s", len(mutations), hall_id)


def clear_seats(db, hall_id, seat_ids=None):
    hall = get_hall(db, hall_id)

    if seat_ids is None:
        seats = db.query(Seat).filter(Seat.hall_id == hall.id).all()
    else:
        seats = list(_seats_by_id(db, hall.id, seat_ids).values())

    for seat in seats:
        seat.occupy(None)

    hall.updated_at = utcnow()
    _commit(db, f"clearing seats of hall {hall_id}")
    logger.info("Cleared %d seats in hall %s", len(seats), hall_id)
    return len(seats)


def allocate_hall_seats(db, hall_id, seat_ids, order, source):
    """
    Run the allocator over seats of one hall and persist the result.

    For a RosterSlice the roster is loaded here and every register number
    already seated anywhere, the selected seats included, is excluded.
    """
    hall = get_hall(db, hall_id)
    if not seat_ids:
        raise ValidationError("Select at least one seat")
    selected = list(_seats_by_id(db, hall.id, seat_ids).values())
    if len(selected) != len(seat_ids):
        raise ValidationError("The same seat was selected more than once")

    if isinstance(source, RosterSlice):
        excluded = frozenset(fetch_assigned_register_numbers(db))
        source = RosterSlice(
            students=fetch_roster(db, source.department, source.semester),
            start=source.start,
            end=source.end,
            department=source.department,
            semester=source.semester,
            excluded_register_numbers=excluded | frozenset(source.excluded_register_numbers)
        )

    mutations = allocator.allocate(selected, order, source)
    apply_seat_mutations(db, hall.id, mutations)
    return mutations


def update_seats(db, hall_id, updates):
    """Raw batch update from (seat id, SeatOccupancy or None) pairs."""
    mutations = [SeatMutation(seat_id=seat_id, occupancy=occupancy) for seat_id, occupancy in updates]
    apply_seat_mutations(db, hall_id, mutations)


def hall_occupancy(db):
    """(hall, total seats, assigned seats) for every hall, newest first."""
    counts = dict(
        (hall_id, (total, assigned or 0))
        for hall_id, total, assigned in (
            db.query(
                Seat.hall_id,
                func.count(Seat.id),
                func.sum(case((Seat.is_assigned.is_(True), 1), else_=0)),
            )
            .group_by(Seat.hall_id)
            .all()
        )
    )
    return [
        (hall, *counts.get(hall.id, (0, 0)))
        for hall in list_halls(db)
    ]


# Students

def list_students(db):
    return db.query(Student).order_by(Student.created_at.desc(), Student.id.desc()).all()


def search_students(db, department=None, semester=None):
    query = db.query(Student)
    if department:
        query = query.filter(Student.department == department)
    if semester:
        query = query.filter(Student.semester == semester)
    return query.order_by(Student.register_number).all()


def fetch_roster(db, department=None, semester=None):
    return [
        RosterStudent(
            register_number=s.register_number,
            name=s.name,
            department=s.department,
            semester=s.semester,
            class_section=s.class_section
        )
        for s in search_students(db, department, semester)
    ]


def add_student(db, register_number, name, department, semester, class_section=None):
    existing = db.query(Student).filter(Student.register_number == register_number).first()
    if existing:
        raise ConflictError(f"Student with register number {register_number} already exists")

    student = Student(
        register_number=register_number,
        name=name,
        department=department,
        semester=semester,
        class_section=class_section or None
    )
    db.add(student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Student with register number {register_number} already exists") from None
    db.refresh(student)
    return student


def bulk_add_students(db, students):
    """
    Insert every student whose register number is new. When some were skipped
    the inserted ones stay committed and PartialBulkFailure reports both lists.
    """
    incoming = [s.register_number for s in students]
    existing = {
        r.register_number
        for r in db.query(Student.register_number).filter(Student.register_number.in_(incoming)).all()
    }

    inserted = []
    skipped = []
    seen = set()
    for s in students:
        if s.register_number in existing or s.register_number in seen:
            skipped.append(s.register_number)
            continue
        seen.add(s.register_number)

        student = Student(
            register_number=s.register_number,
            name=s.name,
            department=s.department,
            semester=s.semester,
            class_section=s.class_section or None
        )
        db.add(student)
        inserted.append(student)

    _commit(db, "bulk student insert")
    for student in inserted:
        db.refresh(student)

    if skipped:
        logger.info("Bulk insert added %d students, skipped %d duplicates", len(inserted), len(skipped))
        raise PartialBulkFailure(inserted, skipped)
    return inserted


def delete_student(db, student_id):
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise NotFoundError(f"Student {student_id} not found")
    db.delete(student)
    _commit(db, f"deletion of student {student_id}")


# Departments

def list_departments(db):
    """(department, student count) pairs sorted by name."""
    counts = dict(
        db.query(Student.department, func.count(Student.id))
        .group_by(Student.department)
        .all()
    )
    departments = db.query(Department).order_by(Department.name).all()
    return [(d, counts.get(d.name, 0)) for d in departments]


def get_department(db, department_id):
    department = db.query(Department).filter(Department.id == department_id).first()
    if not department:
        raise NotFoundError(f"Department {department_id} not found")
    return department


def create_department(db, name):
    name = (name or "").strip()
    if not name:
        raise ValidationError("Department name is required")
    if db.query(Department).filter(Department.name == name).first():
        raise ConflictError(f"Department {name} already exists")

    department = Department(name=name)
    db.add(department)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Department {name} already exists") from None
    db.refresh(department)
    return department


def delete_department(db, department_id):
    """Delete a department and every student whose department matches its name."""
    department = get_department(db, department_id)
    name = department.name
    removed = (
        db.query(Student)
        .filter(Student.department == name)
        .delete(synchronize_session=False)
    )
    db.delete(department)
    _commit(db, f"deletion of department {department_id}")
    logger.info("Deleted department %r and %d of its students", name, removed)
    return removed
