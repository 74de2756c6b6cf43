# ncc_portal/services/roles.py
"""Role store lookups. Anything admin-only goes through ``ensure_admin``."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ncc_portal.core.context import AuthContext
from ncc_portal.core.errors import AuthorizationError, ValidationError
from ncc_portal.models.user import APP_ROLES, ROLE_ADMIN, RoleAssignment

log = logging.getLogger("roles")


def has_role(db: Session, user_id: str, role: str) -> bool:
    """Is there a role row for this identity? Store errors propagate."""
    # a non-label value would be rejected by a native enum column
    if not user_id or role not in APP_ROLES:
        return False
    stmt = (
        select(RoleAssignment.id)
        .where(RoleAssignment.user_id == user_id, RoleAssignment.role == role)
        .limit(1)
    )
    return db.execute(stmt).first() is not None


def is_admin(db: Session, user_id: str) -> bool:
    return has_role(db, user_id, ROLE_ADMIN)


def ensure_admin(db: Session, ctx: AuthContext) -> None:
    # re-checked against the store on every call; ctx.is_admin is informational
    if not is_admin(db, ctx.user_id):
        log.info("admin access denied for %s", ctx.user_id)
        raise AuthorizationError()


def grant_role(db: Session, user_id: str, role: str) -> RoleAssignment:
    """Idempotent. Stages the row; caller commits."""
    if role not in APP_ROLES:
        raise ValidationError(f"Unknown role: {role}")
    existing = db.execute(
        select(RoleAssignment)
        .where(RoleAssignment.user_id == user_id, RoleAssignment.role == role)
        .limit(1)
    ).scalar_one_or_none()
    if existing:
        return existing
    row = RoleAssignment(user_id=user_id, role=role)
    db.add(row)
    return row
