from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from examhall.models import HORIZONTAL, RosterSlice, SeatOccupancy, SequentialPattern


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
    return value or None


class HallCreate(BaseModel):
    """
    Example request body:
    {
      "name": "Main Hall",
      "rows": 5,
      "columns": 4,
      "seats_per_bench": 2
    }
    """
    name: str = Field(min_length=1)
    rows: int = Field(gt=0)
    columns: int = Field(gt=0)
    seats_per_bench: int = Field(gt=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class HallOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    rows: int
    columns: int
    seats_per_bench: int
    created_at: datetime
    updated_at: datetime


class HallStats(BaseModel):
    id: int
    name: str
    total: int
    assigned: int


class SeatOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    hall_id: int
    row_number: int
    column_number: int
    seat_number: int
    register_number: Optional[str] = None
    student_name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[str] = None
    is_assigned: bool


class SeatUpdate(BaseModel):
    id: int
    register_number: Optional[str] = None
    student_name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[str] = None

    @field_validator("register_number", "student_name", "department", "semester")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    def occupancy(self):
        if self.register_number is None:
            return None
        return SeatOccupancy(
            register_number=self.register_number,
            student_name=self.student_name,
            department=self.department,
            semester=self.semester
        )


class SeatBatchUpdate(BaseModel):
    seats: List[SeatUpdate] = Field(min_length=1)


class SeatClear(BaseModel):
    seat_ids: Optional[List[int]] = None


class SequentialSource(BaseModel):
    kind: Literal["sequential"]
    starting_register_number: str = Field(min_length=1)
    student_name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[str] = None

    def to_source(self):
        return SequentialPattern(
            starting_register_number=self.starting_register_number,
            student_name=self.student_name,
            department=self.department,
            semester=self.semester
        )


class RosterSource(BaseModel):
    """``start`` and ``end`` are 1-based and inclusive."""
    kind: Literal["roster"]
    start: int = Field(ge=1)
    end: int = Field(ge=0)
    department: Optional[str] = None
    semester: Optional[str] = None

    def to_source(self):
        return RosterSlice(
            students=[],
            start=self.start,
            end=self.end,
            department=self.department,
            semester=self.semester
        )


class AllocateRequest(BaseModel):
    """
    Example request body:
    {
      "seat_ids": [1, 2, 3],
      "order": "vertical",
      "source": {"kind": "sequential", "starting_register_number": "22CS001"}
    }
    """
    seat_ids: List[int] = Field(min_length=1)
    order: Literal["horizontal", "vertical"] = HORIZONTAL
    source: Annotated[Union[SequentialSource, RosterSource], Field(discriminator="kind")]


class SeatMutationOut(BaseModel):
    seat_id: int
    register_number: Optional[str] = None
    student_name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[str] = None
    is_assigned: bool

    @classmethod
    def from_mutation(cls, mutation):
        occupancy = mutation.occupancy
        return cls(
            seat_id=mutation.seat_id,
            register_number=occupancy.register_number if occupancy else None,
            student_name=occupancy.student_name if occupancy else None,
            department=occupancy.department if occupancy else None,
            semester=occupancy.semester if occupancy else None,
            is_assigned=mutation.is_assigned
        )


class StudentCreate(BaseModel):
    register_number: str = Field(min_length=1)
    name: str = Field(min_length=1)
    department: str = Field(min_length=1)
    semester: str = Field(min_length=1)
    class_section: Optional[str] = None

    @field_validator("register_number", "name", "department", "semester")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class StudentBulkCreate(BaseModel):
    students: List[StudentCreate] = Field(min_length=1)


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    register_number: str
    name: str
    department: str
    semester: str
    class_section: Optional[str] = None
    created_at: datetime


class StudentTextImport(BaseModel):
    """
    ``data`` holds one ``name, register number`` pair per line; every student
    is added to the department in the path and the given ``semester``.
    """
    semester: str = Field(min_length=1)
    data: str = Field(min_length=1)


class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1)


class DepartmentOut(BaseModel):
    id: int
    name: str
    student_count: int = 0


class AssignmentOut(BaseModel):
    register_number: Optional[str] = None
    student_name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[str] = None
    hall_name: str
    seat_label: str


class StudentRosterImport(BaseModel):
    """One ``register number, name, department, semester[, section]`` line per student."""
    data: str = Field(min_length=1)
