# ncc_portal/services/students.py
"""
Encrypted write / decrypted read procedures for student profiles.

These are the only functions that touch the ``*_encrypted`` columns.
Every call works on ``ctx.user_id``; no other identity can be passed in.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ncc_portal.core.context import AuthContext
from ncc_portal.core.crypto import FieldCodec, get_codec
from ncc_portal.core.errors import (
    ConflictError, DecodeError, EncryptionError, NotFoundError, ValidationError,
)
from ncc_portal.models.student import SENSITIVE_FIELDS, Student
from ncc_portal.schemas.student import StudentDecryptedOut, StudentIn
from ncc_portal.services.audit import write_audit

log = logging.getLogger("students")

PROFILE_FIELDS = (
    "name", "email", "branch", "year", "address",
    "phone_number", "parents_phone_number",
)
REQUIRED_FOR_COMPLETE = PROFILE_FIELDS


def get_by_user_id(db: Session, user_id: str) -> Optional[Student]:
    return db.execute(select(Student).where(Student.user_id == user_id)).scalar_one_or_none()


def require_own_student(db: Session, ctx: AuthContext) -> Student:
    student = get_by_user_id(db, ctx.user_id)
    if student is None:
        raise NotFoundError("Please save your student details first.")
    return student


def _check_required(payload: StudentIn) -> None:
    if not (payload.name or "").strip():
        raise ValidationError("Name is required", field="name")
    if not (payload.email or "").strip():
        raise ValidationError("Email is required", field="email")


def _encrypt_sensitive(codec: FieldCodec, payload: StudentIn) -> Dict[str, Optional[str]]:
    """
    Column values for every sensitive pair. Runs before the row is touched,
    so an EncryptionError leaves nothing staged.
    """
    values: Dict[str, Optional[str]] = {}
    for plain_col, enc_col in SENSITIVE_FIELDS.items():
        plain = getattr(payload, plain_col)
        try:
            token = codec.encrypt(plain)
        except EncryptionError as e:
            log.error("encryption failed for field %s", plain_col)
            raise EncryptionError(field=plain_col) from e
        # absent -> NULL in both columns
        values[plain_col] = plain if token is not None else None
        values[enc_col] = token
    return values


def _apply(student: Student, payload: StudentIn, sensitive: Dict[str, Optional[str]]) -> List[str]:
    """Copy payload onto the row; return names of the fields that changed."""
    changed = []
    for col in PROFILE_FIELDS:
        new = getattr(payload, col)
        if getattr(student, col) != new:
            changed.append(col)
        setattr(student, col, new)
    for plain_col, enc_col in SENSITIVE_FIELDS.items():
        if getattr(student, plain_col) != sensitive[plain_col]:
            changed.append(plain_col)
        setattr(student, plain_col, sensitive[plain_col])
        setattr(student, enc_col, sensitive[enc_col])
    return changed


def insert_student_encrypted(
    db: Session,
    ctx: AuthContext,
    payload: StudentIn,
    *,
    codec: Optional[FieldCodec] = None,
    request: Optional[Request] = None,
) -> str:
    """Create the caller's student row. Returns the new ``student_id``."""
    _check_required(payload)
    if get_by_user_id(db, ctx.user_id) is not None:
        raise ConflictError("Student profile already exists.")

    sensitive = _encrypt_sensitive(codec or get_codec(), payload)

    student = Student(user_id=ctx.user_id)
    fields = _apply(student, payload, sensitive)
    db.add(student)
    try:
        db.flush()
        write_audit(
            db, action="STUDENT_INSERT", target_type="Student",
            target_id=student.student_id, new_values={"fields": fields},
            request=request, ctx=ctx,
        )
        db.commit()
    except IntegrityError:
        # lost a race on the unique user_id
        db.rollback()
        raise ConflictError("Student profile already exists.") from None
    log.info("student %s created for %s", student.student_id, ctx.user_id)
    return student.student_id


def update_student_encrypted(
    db: Session,
    ctx: AuthContext,
    payload: StudentIn,
    *,
    codec: Optional[FieldCodec] = None,
    request: Optional[Request] = None,
) -> None:
    """Overwrite the caller's student row (last write wins)."""
    _check_required(payload)
    student = get_by_user_id(db, ctx.user_id)
    if student is None:
        raise NotFoundError("No student profile to update.")

    sensitive = _encrypt_sensitive(codec or get_codec(), payload)

    changed = _apply(student, payload, sensitive)
    write_audit(
        db, action="STUDENT_UPDATE", target_type="Student",
        target_id=student.student_id, new_values={"fields": changed},
        request=request, ctx=ctx,
    )
    db.commit()
    log.info("student %s updated (%d fields)", student.student_id, len(changed))


def _decrypt_field(codec: FieldCodec, student: Student, plain_col: str, enc_col: str) -> Optional[str]:
    try:
        return codec.decrypt(getattr(student, enc_col))
    except DecodeError:
        # withhold just this field
        log.warning("could not decrypt %s for student %s", plain_col, student.student_id)
        return None


def is_profile_complete(row: StudentDecryptedOut) -> bool:
    if any(getattr(row, f) in (None, "") for f in REQUIRED_FOR_COMPLETE):
        return False
    if not (row.aadhaar_number or row.pan_number):
        return False
    return bool(row.account_number)


def get_student_decrypted(
    db: Session,
    ctx: AuthContext,
    *,
    codec: Optional[FieldCodec] = None,
    request: Optional[Request] = None,
) -> List[StudentDecryptedOut]:
    """Zero or one row: the caller's own profile with sensitive fields decrypted."""
    student = get_by_user_id(db, ctx.user_id)
    if student is None:
        return []

    codec = codec or get_codec()
    data = {f: getattr(student, f) for f in PROFILE_FIELDS}
    for plain_col, enc_col in SENSITIVE_FIELDS.items():
        data[plain_col] = _decrypt_field(codec, student, plain_col, enc_col)

    row = StudentDecryptedOut(
        student_id=student.student_id,
        user_id=student.user_id,
        created_at=student.created_at,
        **data,
    )
    row.profile_complete = is_profile_complete(row)

    write_audit(
        db, action="STUDENT_DECRYPT_READ", target_type="Student",
        target_id=student.student_id, request=request, ctx=ctx,
    )
    db.commit()
    return [row]
