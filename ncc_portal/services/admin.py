# ncc_portal/services/admin.py
"""Aggregate views across all students. Each entry point checks the role store first."""
from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from ncc_portal.core.context import AuthContext
from ncc_portal.models.student import ExperienceRecord, NccDetail, Student
from ncc_portal.schemas.records import ExperienceAdminOut, NccDetailAdminOut
from ncc_portal.schemas.student import StudentListItem
from ncc_portal.services.roles import ensure_admin


def list_all_students(db: Session, ctx: AuthContext) -> List[StudentListItem]:
    ensure_admin(db, ctx)
    rows = db.execute(select(Student).order_by(Student.created_at.desc())).scalars()
    return [StudentListItem.model_validate(s) for s in rows]


def list_all_ncc_details(db: Session, ctx: AuthContext) -> List[NccDetailAdminOut]:
    ensure_admin(db, ctx)
    stmt = (
        select(NccDetail, Student.name, Student.email)
        .join(Student, Student.student_id == NccDetail.student_id)
        .order_by(NccDetail.created_at.desc())
    )
    out = []
    for ncc, name, email in db.execute(stmt):
        item = NccDetailAdminOut.model_validate(ncc)
        item.student_name = name
        item.student_email = email
        out.append(item)
    return out


def list_all_experiences(db: Session, ctx: AuthContext) -> List[ExperienceAdminOut]:
    ensure_admin(db, ctx)
    stmt = (
        select(ExperienceRecord, Student.name, Student.email)
        .join(Student, Student.student_id == ExperienceRecord.student_id)
        .order_by(ExperienceRecord.created_at.desc())
    )
    out = []
    for exp, name, email in db.execute(stmt):
        item = ExperienceAdminOut.model_validate(exp)
        item.student_name = name
        item.student_email = email
        out.append(item)
    return out
