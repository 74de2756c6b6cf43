# ================================
# ncc_portal/services/export_service.py
# ================================
from __future__ import annotations
from typing import Iterable, List, Sequence
from io import BytesIO
from datetime import date, datetime

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

from sqlalchemy.orm import Session

from ncc_portal.core.context import AuthContext
from ncc_portal.services.admin import (
    list_all_experiences, list_all_ncc_details, list_all_students,
)

# Display columns only: the sensitive identifiers never go into a file
STUDENT_COLUMNS = [
    ("Name", "name"), ("Email", "email"), ("Branch", "branch"), ("Year", "year"),
    ("Phone", "phone_number"), ("Parent's phone", "parents_phone_number"),
    ("Address", "address"), ("Created", "created_at"),
]
NCC_COLUMNS = [
    ("Student", "student_name"), ("Email", "student_email"), ("Wing", "ncc_wing"),
    ("Regimental no.", "regimental_number"), ("Cadet rank", "cadet_rank"),
    ("Enrolled", "enrollment_date"), ("Created", "created_at"),
]
EXPERIENCE_COLUMNS = [
    ("Student", "student_name"), ("Email", "student_email"), ("Type", "experience"),
    ("Company", "company_name"), ("Role", "role"), ("Start", "start_date"),
    ("End", "end_date"), ("Created", "created_at"),
]


# ---------- Helper ----------
def _autosize(ws):
    ws.freeze_panes = "A2"
    for col in ws.columns:
        w = max(10, *(len(str(c.value)) if c.value else 0 for c in col)) + 2
        ws.column_dimensions[col[0].column_letter].width = min(w, 40)


def _cell(v):
    if isinstance(v, datetime):
        return v.replace(tzinfo=None)
    return "" if v is None else v


def _fill_sheet(ws, columns: Sequence[tuple], rows: Iterable) -> None:
    ws.append([title for title, _ in columns])
    for c in ws[1]:
        c.font = Font(bold=True)
    for r in rows:
        ws.append([_cell(getattr(r, attr, None)) for _, attr in columns])

    # date columns
    for cells in ws.iter_cols(min_row=2):
        for c in cells:
            if isinstance(c.value, datetime):
                c.number_format = "dd/mm/yyyy hh:mm"
                c.alignment = Alignment(horizontal="center")
            elif isinstance(c.value, date):
                c.number_format = "dd/mm/yyyy"
                c.alignment = Alignment(horizontal="center")
    _autosize(ws)


def build_admin_workbook(students: List, ncc: List, experiences: List) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Students"
    _fill_sheet(ws, STUDENT_COLUMNS, students)
    _fill_sheet(wb.create_sheet("NCC"), NCC_COLUMNS, ncc)
    _fill_sheet(wb.create_sheet("Experience"), EXPERIENCE_COLUMNS, experiences)

    out = BytesIO()
    wb.save(out)
    out.seek(0)
    return out.getvalue()


def export_students_xlsx(db: Session, ctx: AuthContext) -> bytes:
    """Admin only (each list call re-checks the role)."""
    return build_admin_workbook(
        list_all_students(db, ctx),
        list_all_ncc_details(db, ctx),
        list_all_experiences(db, ctx),
    )
