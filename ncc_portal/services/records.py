# ncc_portal/services/records.py
from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from ncc_portal.core.context import AuthContext
from ncc_portal.models.student import ExperienceRecord, NccDetail
from ncc_portal.schemas.records import ExperienceIn, NccDetailIn
from ncc_portal.services.students import get_by_user_id, require_own_student


# ================= NCC =================
def add_ncc_detail(db: Session, ctx: AuthContext, payload: NccDetailIn) -> NccDetail:
    student = require_own_student(db, ctx)
    row = NccDetail(student_id=student.student_id, **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def list_own_ncc_details(db: Session, ctx: AuthContext) -> List[NccDetail]:
    student = get_by_user_id(db, ctx.user_id)
    if student is None:
        return []
    stmt = (
        select(NccDetail)
        .where(NccDetail.student_id == student.student_id)
        .order_by(NccDetail.created_at.desc())
    )
    return list(db.execute(stmt).scalars())


# ================= Experience =================
def add_experience(db: Session, ctx: AuthContext, payload: ExperienceIn) -> ExperienceRecord:
    student = require_own_student(db, ctx)
    row = ExperienceRecord(student_id=student.student_id, **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def list_own_experiences(db: Session, ctx: AuthContext) -> List[ExperienceRecord]:
    student = get_by_user_id(db, ctx.user_id)
    if student is None:
        return []
    stmt = (
        select(ExperienceRecord)
        .where(ExperienceRecord.student_id == student.student_id)
        .order_by(ExperienceRecord.created_at.desc())
    )
    return list(db.execute(stmt).scalars())
