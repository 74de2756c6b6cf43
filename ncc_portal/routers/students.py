# ncc_portal/routers/students.py
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ncc_portal.core.context import AuthContext
from ncc_portal.db.session import get_db
from ncc_portal.routers.auth import require_context
from ncc_portal.schemas.records import (
    ExperienceIn, ExperienceOut, NccDetailIn, NccDetailOut,
)
from ncc_portal.schemas.student import StudentCreated, StudentDecryptedOut, StudentIn
from ncc_portal.services import records, students

router = APIRouter(prefix="/students/me", tags=["Students"])


# ================= Profile =================
@router.get("", response_model=List[StudentDecryptedOut])
def read_own_profile(
    request: Request,
    ctx: AuthContext = Depends(require_context),
    db: Session = Depends(get_db),
):
    """Own profile with Aadhaar/PAN/account decrypted. Empty list if none yet."""
    return students.get_student_decrypted(db, ctx, request=request)


@router.post("", response_model=StudentCreated, status_code=status.HTTP_201_CREATED)
def create_own_profile(
    payload: StudentIn,
    request: Request,
    ctx: AuthContext = Depends(require_context),
    db: Session = Depends(get_db),
):
    student_id = students.insert_student_encrypted(db, ctx, payload, request=request)
    return {"student_id": student_id}


@router.put("", status_code=status.HTTP_204_NO_CONTENT)
def update_own_profile(
    payload: StudentIn,
    request: Request,
    ctx: AuthContext = Depends(require_context),
    db: Session = Depends(get_db),
):
    students.update_student_encrypted(db, ctx, payload, request=request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ================= NCC =================
@router.get("/ncc", response_model=List[NccDetailOut])
def read_own_ncc(ctx: AuthContext = Depends(require_context), db: Session = Depends(get_db)):
    return records.list_own_ncc_details(db, ctx)


@router.post("/ncc", response_model=NccDetailOut, status_code=status.HTTP_201_CREATED)
def add_own_ncc(
    payload: NccDetailIn,
    ctx: AuthContext = Depends(require_context),
    db: Session = Depends(get_db),
):
    return records.add_ncc_detail(db, ctx, payload)


# ================= Experience =================
@router.get("/experiences", response_model=List[ExperienceOut])
def read_own_experiences(ctx: AuthContext = Depends(require_context), db: Session = Depends(get_db)):
    return records.list_own_experiences(db, ctx)


@router.post("/experiences", response_model=ExperienceOut, status_code=status.HTTP_201_CREATED)
def add_own_experience(
    payload: ExperienceIn,
    ctx: AuthContext = Depends(require_context),
    db: Session = Depends(get_db),
):
    return records.add_experience(db, ctx, payload)
