import logging
from typing import Optional

from fastapi import FastAPI, Depends, Body, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.orm import Session

from examhall import config, exports, repository
from examhall.database import Base, engine, SessionLocal
from examhall.db_models import utcnow
from examhall.errors import SeatingError, PartialBulkFailure
from examhall.layouts import group_by_bench
from examhall.reports import collect_assignment_report
from examhall.schemas import (
    AllocateRequest,
    AssignmentOut,
    DepartmentCreate,
    DepartmentOut,
    HallCreate,
    HallOut,
    HallStats,
    SeatBatchUpdate,
    SeatClear,
    SeatMutationOut,
    SeatOut,
    StudentBulkCreate,
    StudentCreate,
    StudentOut,
    StudentRosterImport,
    StudentTextImport,
)
from examhall.student_import import parse_batch, parse_roster

logging.basicConfig(
    level = config.LOG_LEVEL,
    format = "%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


app = FastAPI(title = "Exam Hall Seating API")

app.add_middleware(
    CORSMiddleware,
    allow_origins = config.CORS_ORIGINS,
    allow_methods = ["*"],
    allow_headers = ["*"],
)

Base.metadata.create_all(bind = engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@app.exception_handler(PartialBulkFailure)
async def partial_bulk_failure_handler(request: Request, exc: PartialBulkFailure):
    return JSONResponse(
        status_code = exc.status_code,
        content = {
            "detail": exc.detail,
            "inserted": [StudentOut.model_validate(s).model_dump(mode = "json") for s in exc.inserted],
            "skipped": exc.skipped
        }
    )


@app.exception_handler(SeatingError)
async def seating_error_handler(request: Request, exc: SeatingError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code = exc.status_code, content = {"detail": exc.detail})


@app.get("/health")
def health():
    return {"status": "OK", "timestamp": utcnow().isoformat()}


# Halls

@app.get("/api/halls", response_model = list[HallOut])
def get_halls(db: Session = Depends(get_db)):
    return repository.list_halls(db)


@app.post("/api/halls", response_model = HallOut, status_code = 201)
def create_hall(req: HallCreate, db: Session = Depends(get_db)):
    return repository.create_hall_with_grid(
        db, req.name, req.rows, req.columns, req.seats_per_bench
    )


@app.get("/api/halls/stats", response_model = list[HallStats])
def get_hall_stats(db: Session = Depends(get_db)):
    return [
        HallStats(id = hall.id, name = hall.name, total = total, assigned = assigned)
        for hall, total, assigned in repository.hall_occupancy(db)
    ]


@app.get("/api/halls/{hall_id}", response_model = HallOut)
def get_hall(hall_id: int, db: Session = Depends(get_db)):
    return repository.get_hall(db, hall_id)


@app.delete("/api/halls/{hall_id}")
def delete_hall(hall_id: int, db: Session = Depends(get_db)):
    repository.delete_hall_cascade(db, hall_id)
    return {"message": "Hall deleted successfully"}


@app.get("/api/halls/{hall_id}/seats", response_model = list[SeatOut])
def get_seats(hall_id: int, db: Session = Depends(get_db)):
    return repository.fetch_seats(db, hall_id)


@app.put("/api/halls/{hall_id}/seats")
def update_seats(hall_id: int, req: SeatBatchUpdate, db: Session = Depends(get_db)):
    repository.update_seats(db, hall_id, [(s.id, s.occupancy()) for s in req.seats])
    return {"message": "Seats updated successfully", "updated": len(req.seats)}


@app.get("/api/halls/{hall_id}/layout")
def get_layout(hall_id: int, db: Session = Depends(get_db)):
    hall = repository.get_hall(db, hall_id)
    seats = repository.fetch_seats(db, hall_id)

    return {
        "hall": HallOut.model_validate(hall).model_dump(mode = "json"),
        "rows": [
            [
                [SeatOut.model_validate(seat).model_dump(mode = "json") for seat in bench]
                for bench in benches
            ]
            for benches in group_by_bench(seats, hall.rows, hall.columns)
        ]
    }


@app.post("/api/halls/{hall_id}/allocate")
def allocate_seats(hall_id: int, req: AllocateRequest, db: Session = Depends(get_db)):
    mutations = repository.allocate_hall_seats(
        db, hall_id, req.seat_ids, req.order, req.source.to_source()
    )
    assigned = sum(1 for m in mutations if m.is_assigned)
    logger.info(
        "Allocated %d of %d selected seats in hall %s (%s, %s)",
        assigned, len(mutations), hall_id, req.order, req.source.kind
    )

    return {
        "message": "Allocation completed",
        "assigned": assigned,
        "unassigned": len(mutations) - assigned,
        "seats": [SeatMutationOut.from_mutation(m) for m in mutations]
    }


@app.post("/api/halls/{hall_id}/seats/clear")
def clear_hall_seats(
    hall_id: int,
    req: Optional[SeatClear] = Body(None),
    db: Session = Depends(get_db)
):
    seat_ids = req.seat_ids if req else None
    cleared = repository.clear_seats(db, hall_id, seat_ids)
    return {"message": "Seats cleared successfully", "cleared": cleared}


@app.post("/api/halls/{hall_id}/seats/{seat_id}/clear")
def clear_seat(hall_id: int, seat_id: int, db: Session = Depends(get_db)):
    repository.clear_seats(db, hall_id, [seat_id])
    return {"message": "Seat cleared successfully"}


@app.get("/api/halls/{hall_id}/export/csv")
def export_hall_csv(hall_id: int, db: Session = Depends(get_db)):
    hall = repository.get_hall(db, hall_id)
    df = exports.seating_frame(hall, repository.fetch_seats(db, hall_id))

    file_path = exports.export_path(config.EXPORT_DIR, f"{exports.safe_filename(hall.name)}_seating.csv")
    exports.write_csv(df, file_path)

    return FileResponse(path = str(file_path), filename = file_path.name, media_type = "text/csv")


@app.get("/api/halls/{hall_id}/export/excel")
def export_hall_excel(hall_id: int, db: Session = Depends(get_db)):
    hall = repository.get_hall(db, hall_id)
    df = exports.seating_frame(hall, repository.fetch_seats(db, hall_id))

    file_path = exports.export_path(config.EXPORT_DIR, f"{exports.safe_filename(hall.name)}_seating.xlsx")
    exports.write_excel(df, file_path, sheet_name = "Seating")

    return FileResponse(path = str(file_path), filename = file_path.name, media_type = EXCEL_MEDIA_TYPE)


@app.get("/api/halls/{hall_id}/export/pdf")
def export_hall_pdf(hall_id: int, db: Session = Depends(get_db)):
    hall = repository.get_hall(db, hall_id)

    file_path = exports.export_path(config.EXPORT_DIR, f"{exports.safe_filename(hall.name)}_seating.pdf")
    exports.write_seating_pdf(hall, repository.fetch_seats(db, hall_id), file_path)

    return FileResponse(path = str(file_path), filename = file_path.name, media_type = "application/pdf")


# Students

@app.get("/api/students", response_model = list[StudentOut])
def get_students(db: Session = Depends(get_db)):
    return repository.list_students(db)


@app.get("/api/students/search", response_model = list[StudentOut])
def search_students(
    department: Optional[str] = None,
    semester: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return repository.search_students(db, department, semester)


@app.post("/api/students", response_model = StudentOut, status_code = 201)
def add_student(req: StudentCreate, db: Session = Depends(get_db)):
    return repository.add_student(
        db, req.register_number, req.name, req.department, req.semester, req.class_section
    )


@app.post("/api/students/bulk", response_model = list[StudentOut], status_code = 201)
def bulk_add_students(req: StudentBulkCreate, db: Session = Depends(get_db)):
    return repository.bulk_add_students(db, req.students)


@app.post("/api/students/import", response_model = list[StudentOut], status_code = 201)
def import_students(req: StudentRosterImport, db: Session = Depends(get_db)):
    return repository.bulk_add_students(db, parse_roster(req.data))


@app.get("/api/students/assignments", response_model = list[AssignmentOut])
def get_student_assignments(
    department: Optional[str] = None,
    semester: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return [r.to_dict() for r in collect_assignment_report(db, department, semester)]


def _report_filename(department, semester, extension):
    parts = [p for p in (department, semester) if p] or ["All"]
    return exports.safe_filename("-".join(parts + ["Hall-Assignments"])) + extension


@app.get("/api/students/assignments/export/excel")
def export_assignments_excel(
    department: Optional[str] = None,
    semester: Optional[str] = None,
    db: Session = Depends(get_db)
):
    records = collect_assignment_report(db, department, semester)

    file_path = exports.export_path(config.EXPORT_DIR, _report_filename(department, semester, ".xlsx"))
    exports.write_excel(exports.report_frame(records), file_path, sheet_name = "Assignments")

    return FileResponse(path = str(file_path), filename = file_path.name, media_type = EXCEL_MEDIA_TYPE)


@app.get("/api/students/assignments/export/pdf")
def export_assignments_pdf(
    department: Optional[str] = None,
    semester: Optional[str] = None,
    db: Session = Depends(get_db)
):
    records = collect_assignment_report(db, department, semester)
    title = " - ".join([p for p in (department, semester) if p] + ["Hall Assignments"])

    file_path = exports.export_path(config.EXPORT_DIR, _report_filename(department, semester, ".pdf"))
    exports.write_report_pdf(records, file_path, title = title)

    return FileResponse(path = str(file_path), filename = file_path.name, media_type = "application/pdf")


@app.get("/api/students/assigned-regnos", response_model = list[str])
def get_assigned_register_numbers(db: Session = Depends(get_db)):
    return repository.fetch_assigned_register_numbers(db)


@app.get("/api/students/export")
def export_students(db: Session = Depends(get_db)):
    df = exports.roster_frame(repository.search_students(db))

    file_path = exports.export_path(config.EXPORT_DIR, "students.csv")
    exports.write_csv(df, file_path)

    return FileResponse(path = str(file_path), filename = file_path.name, media_type = "text/csv")


@app.delete("/api/students/{student_id}")
def delete_student(student_id: int, db: Session = Depends(get_db)):
    repository.delete_student(db, student_id)
    return {"message": "Student deleted successfully"}


# Departments

@app.get("/api/departments", response_model = list[DepartmentOut])
def get_departments(db: Session = Depends(get_db)):
    return [
        DepartmentOut(id = d.id, name = d.name, student_count = count)
        for d, count in repository.list_departments(db)
    ]


@app.post("/api/departments", response_model = DepartmentOut, status_code = 201)
def create_department(req: DepartmentCreate, db: Session = Depends(get_db)):
    department = repository.create_department(db, req.name)
    return DepartmentOut(id = department.id, name = department.name)


@app.post("/api/departments/{department_id}/students/import", response_model = list[StudentOut], status_code = 201)
def import_department_students(department_id: int, req: StudentTextImport, db: Session = Depends(get_db)):
    department = repository.get_department(db, department_id)
    students = parse_batch(req.data, department.name, req.semester.strip())
    return repository.bulk_add_students(db, students)


@app.delete("/api/departments/{department_id}")
def delete_department(department_id: int, db: Session = Depends(get_db)):
    removed = repository.delete_department(db, department_id)
    return {
        "message": "Department and all its students deleted successfully",
        "students_deleted": removed
    }


def run():
    import uvicorn

    uvicorn.run(app, host = config.HOST, port = config.PORT)


if __name__ == "__main__":
    run()
