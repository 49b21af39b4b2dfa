from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

HORIZONTAL = "horizontal"
VERTICAL = "vertical"


@dataclass(frozen=True)
class GridSeat:
    """A seat position inside a hall grid. ``id`` is None until persisted."""
    row_number: int
    column_number: int
    seat_number: int
    id: Optional[int] = None


@dataclass(frozen=True)
class SeatOccupancy:
    """Student details copied into a seat at assignment time."""
    register_number: str
    student_name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[str] = None


@dataclass(frozen=True)
class SeatMutation:
    seat_id: Optional[int]
    occupancy: Optional[SeatOccupancy] = None

    @property
    def is_assigned(self):
        return self.occupancy is not None


@dataclass(frozen=True)
class RosterStudent:
    register_number: str
    name: str
    department: str
    semester: str
    class_section: Optional[str] = None


@dataclass(frozen=True)
class SequentialPattern:
    starting_register_number: str
    student_name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[str] = None


@dataclass(frozen=True)
class RosterSlice:
    """
    A 1-based inclusive range ``[start, end]`` over the roster once it has been
    filtered by department/semester, stripped of excluded register numbers and
    sorted by register number.
    """
    students: List[RosterStudent]
    start: int
    end: int
    department: Optional[str] = None
    semester: Optional[str] = None
    excluded_register_numbers: FrozenSet[str] = field(default_factory=frozenset)
