from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from examhall.database import Base
from examhall.models import SeatOccupancy


def utcnow():
    return datetime.now(timezone.utc)


class Hall(Base):
    __tablename__ = "halls"

    id = Column(Integer, primary_key = True, index = True)
    name = Column(String, nullable = False)

    # grid shape is fixed once the seats exist
    rows = Column(Integer, nullable = False)
    columns = Column(Integer, nullable = False)
    seats_per_bench = Column(Integer, nullable = False)

    created_at = Column(DateTime, nullable = False, default = utcnow)
    updated_at = Column(DateTime, nullable = False, default = utcnow)

    seats = relationship(
        "Seat",
        back_populates = "hall",
        cascade = "all, delete-orphan",
        passive_deletes = True
    )

    @property
    def seat_count(self):
        return self.rows * self.columns * self.seats_per_bench


class Seat(Base):
    __tablename__ = "seats"
    __table_args__ = (
        UniqueConstraint("hall_id", "row_number", "column_number", "seat_number", name = "uq_seat_position"),
    )

    id = Column(Integer, primary_key = True, index = True)
    hall_id = Column(Integer, ForeignKey("halls.id", ondelete = "CASCADE"), nullable = False, index = True)

    row_number = Column(Integer, nullable = False)
    column_number = Column(Integer, nullable = False)
    seat_number = Column(Integer, nullable = False)

    register_number = Column(String, nullable = True, index = True)
    student_name = Column(String, nullable = True)
    department = Column(String, nullable = True)
    semester = Column(String, nullable = True)
    is_assigned = Column(Boolean, nullable = False, default = False)

    hall = relationship("Hall", back_populates = "seats")

    @property
    def occupancy(self):
        if self.register_number is None:
            return None
        return SeatOccupancy(
            register_number = self.register_number,
            student_name = self.student_name,
            department = self.department,
            semester = self.semester
        )

    def occupy(self, occupancy):
        """Copy an occupancy into the seat, or clear it when ``occupancy`` is None."""
        if occupancy is None:
            self.register_number = None
            self.student_name = None
            self.department = None
            self.semester = None
        else:
            self.register_number = occupancy.register_number
            self.student_name = occupancy.student_name
            self.department = occupancy.department
            self.semester = occupancy.semester
        self.is_assigned = self.register_number is not None


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key = True, index = True)
    register_number = Column(String, unique = True, nullable = False, index = True)
    name = Column(String, nullable = False)
    department = Column(String, nullable = False, index = True)
    semester = Column(String, nullable = False)
    class_section = Column(String, nullable = True)
    created_at = Column(DateTime, nullable = False, default = utcnow)


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key = True, index = True)
    name = Column(String, unique = True, nullable = False)
    created_at = Column(DateTime, nullable = False, default = utcnow)
