# ncc_portal/routers/admin.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ncc_portal.core.context import AuthContext
from ncc_portal.db.session import get_db
from ncc_portal.routers.auth import require_admin  # guard Admin
from ncc_portal.schemas.records import ExperienceAdminOut, NccDetailAdminOut
from ncc_portal.schemas.student import StudentListItem
from ncc_portal.services import admin as admin_views
from ncc_portal.services.audit import write_audit
from ncc_portal.services.export_service import export_students_xlsx

router = APIRouter(prefix="/admin", tags=["Admin"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/students", response_model=List[StudentListItem])
def admin_students(ctx: AuthContext = Depends(require_admin), db: Session = Depends(get_db)):
    return admin_views.list_all_students(db, ctx)


@router.get("/ncc", response_model=List[NccDetailAdminOut])
def admin_ncc(ctx: AuthContext = Depends(require_admin), db: Session = Depends(get_db)):
    return admin_views.list_all_ncc_details(db, ctx)


@router.get("/experiences", response_model=List[ExperienceAdminOut])
def admin_experiences(ctx: AuthContext = Depends(require_admin), db: Session = Depends(get_db)):
    return admin_views.list_all_experiences(db, ctx)


@router.get("/export.xlsx")
def admin_export(
    request: Request,
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    data = export_students_xlsx(db, ctx)
    write_audit(db, action="ADMIN_EXPORT", target_type="Student", request=request, ctx=ctx)
    db.commit()
    filename = f"ncc_students_{datetime.now().strftime('%Y%m%d_%H%M')}.xlsx"
    return Response(
        content=data,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
