import logging
import re
from pathlib import Path

import pandas as pd
from reportlab.lib.pagesizes import A4, landscape
from reportlab.pdfgen import canvas

from examhall.layouts import group_by_bench

logger = logging.getLogger(__name__)

SEATING_COLUMNS = [
    "Hall Name", "Row", "Column", "Seat",
    "Register Number", "Student Name", "Department", "Semester",
]
REPORT_COLUMNS = [
    "Register Number", "Student Name", "Department", "Semester", "Hall Name", "Seat",
]
ROSTER_COLUMNS = [
    "Register Number", "Name", "Department", "Semester", "Class Section",
]


def safe_filename(name):
    # one path component: no separators, no leading dots
    cleaned = re.sub(r"[^\w.-]+", "_", name.strip())
    return cleaned.lstrip(".") or "hall"


def export_path(export_dir, filename):
    directory = Path(export_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory / filename


def seating_frame(hall, seats):
    """Assigned seats of one hall as a DataFrame."""
    data = [
        {
            "Hall Name": hall.name,
            "Row": seat.row_number,
            "Column": seat.column_number,
            "Seat": seat.seat_number,
            "Register Number": seat.register_number or "",
            "Student Name": seat.student_name or "",
            "Department": seat.department or "",
            "Semester": seat.semester or "",
        }
        for seat in seats
        if seat.is_assigned
    ]
    return pd.DataFrame(data, columns=SEATING_COLUMNS)


def report_frame(records):
    data = [
        {
            "Register Number": r.register_number or "",
            "Student Name": r.student_name or "",
            "Department": r.department or "",
            "Semester": r.semester or "",
            "Hall Name": r.hall_name,
            "Seat": r.seat_label,
        }
        for r in records
    ]
    return pd.DataFrame(data, columns=REPORT_COLUMNS)


def roster_frame(students):
    data = [
        {
            "Register Number": s.register_number,
            "Name": s.name,
            "Department": s.department,
            "Semester": s.semester,
            "Class Section": s.class_section or "",
        }
        for s in students
    ]
    return pd.DataFrame(data, columns=ROSTER_COLUMNS)


def write_csv(df, file_path):
    df.to_csv(file_path, index=False)
    logger.info("Wrote %d rows to %s", len(df), file_path)
    return file_path


def write_excel(df, file_path, sheet_name="Sheet1"):
    df.to_excel(file_path, index=False, sheet_name=sheet_name)
    logger.info("Wrote %d rows to %s", len(df), file_path)
    return file_path


def write_seating_pdf(hall, seats, file_path):
    """Printable bench grid: one box per bench, one line per seat."""
    c = canvas.Canvas(str(file_path), pagesize=landscape(A4))
    width, height = landscape(A4)

    margin = 40
    bench_width = (width - 2 * margin) / hall.columns
    line_height = 11
    bench_height = line_height * (hall.seats_per_bench + 1)

    def header():
        c.setFont("Helvetica-Bold", 14)
        c.drawString(margin, height - margin, f"Seating Arrangement - {hall.name}")
        c.setFont("Helvetica", 9)
        c.drawString(
            margin, height - margin - 15,
            f"{hall.rows} x {hall.columns} layout with {hall.seats_per_bench}-seater benches"
        )
        return height - margin - 35

    y = header()
    font_size = 7 if bench_width < 90 else 8

    for row_index, benches in enumerate(group_by_bench(seats, hall.rows, hall.columns), start=1):
        if y - bench_height < margin:
            c.showPage()
            y = header()

        for column_index, bench in enumerate(benches):
            x = margin + column_index * bench_width
            c.rect(x + 2, y - bench_height, bench_width - 4, bench_height)
            c.setFont("Helvetica-Bold", font_size)
            c.drawString(x + 5, y - line_height + 2, f"R{row_index}C{column_index + 1}")

            c.setFont("Helvetica", font_size)
            for seat_index, seat in enumerate(bench, start=1):
                occupant = seat.register_number or "-"
                c.drawString(
                    x + 5, y - line_height * (seat_index + 1) + 2,
                    f"S{seat.seat_number}: {occupant}"[:int(bench_width / 4)]
                )

        y -= bench_height + 6

    c.save()
    logger.info("Wrote seating PDF for hall %s to %s", hall.id, file_path)
    return file_path


def write_report_pdf(records, file_path, title="Hall Assignments"):
    c = canvas.Canvas(str(file_path), pagesize=A4)
    width, height = A4

    def header():
        y = height - 50
        c.setFont("Helvetica-Bold", 14)
        c.drawString(50, y, title)
        y -= 30

        c.setFont("Helvetica", 10)
        c.drawString(50, y, "Reg No")
        c.drawString(150, y, "Name")
        c.drawString(310, y, "Dept")
        c.drawString(370, y, "Sem")
        c.drawString(410, y, "Hall")
        c.drawString(500, y, "Seat")
        y -= 15

        c.line(50, y, 550, y)
        return y - 15

    y = header()
    for r in records:
        if y < 60:
            c.showPage()
            y = header()

        c.drawString(50, y, (r.register_number or "")[:16])
        c.drawString(150, y, (r.student_name or "")[:26])
        c.drawString(310, y, (r.department or "")[:10])
        c.drawString(370, y, (r.semester or "")[:6])
        c.drawString(410, y, r.hall_name[:15])
        c.drawString(500, y, r.seat_label)
        y -= 15

    c.save()
    logger.info("Wrote %d report rows to %s", len(records), file_path)
    return file_path
