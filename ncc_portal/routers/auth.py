# ncc_portal/routers/auth.py
import logging
import time
from typing import Optional
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Form
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from ncc_portal.core.config import settings
from ncc_portal.core.context import AuthContext
from ncc_portal.core.errors import (
    AuthenticationError, AuthorizationError, ConflictError, ValidationError,
)
from ncc_portal.core.security import check_password_policy, hash_password, verify_and_upgrade
from ncc_portal.db.session import get_db
from ncc_portal.models.user import Identity, ROLE_STUDENT
from ncc_portal.schemas.student import EMAIL_REGEX
from ncc_portal.services.audit import write_audit
from ncc_portal.services.roles import ensure_admin, grant_role, is_admin

log = logging.getLogger("auth")

router = APIRouter()

IDLE_TIMEOUT_SEC = settings.IDLE_TIMEOUT_SEC


def get_current_identity(request: Request, db: Session = Depends(get_db)) -> Optional[Identity]:
    sess = request.session
    now = int(time.time())
    last = int(sess.get("_last_seen") or 0)
    if last and (now - last) > IDLE_TIMEOUT_SEC:
        sess.clear()
        return None
    sess["_last_seen"] = now

    uid = sess.get("uid")
    if not uid:
        return None
    return db.get(Identity, uid)


def require_user(user: Optional[Identity] = Depends(get_current_identity)) -> Identity:
    if not user:
        raise AuthenticationError()
    if not user.is_active:
        raise AuthorizationError("Account disabled.")
    return user


def require_context(
    user: Identity = Depends(require_user),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Explicit per-request caller context; role read fresh from the store."""
    return AuthContext(user_id=user.id, email=user.email, is_admin=is_admin(db, user.id))


def require_admin(
    request: Request,
    ctx: AuthContext = Depends(require_context),
    db: Session = Depends(get_db),
) -> AuthContext:
    try:
        ensure_admin(db, ctx)
    except AuthorizationError:
        write_audit(db, action="ADMIN_DENIED", status="FAILURE", request=request, ctx=ctx)
        db.commit()
        raise
    return ctx


def _start_session(request: Request, user: Identity) -> None:
    request.session.clear()
    request.session["uid"] = user.id
    request.session["_last_seen"] = int(time.time())
    request.session["email"] = user.email


def _user_payload(user: Identity, admin: bool) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "is_active": user.is_active,
        "is_admin": admin,
    }


@router.post("/api/register", status_code=201)
def register(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    full_name: str = Form(""),
    db: Session = Depends(get_db),
):
    email = (email or "").strip().lower()
    if not EMAIL_REGEX.fullmatch(email):
        raise ValidationError("Invalid email address", field="email")
    check_password_policy(password)
    if db.query(Identity).filter(Identity.email == email).first():
        raise ConflictError("Email already registered.")

    user = Identity(
        email=email,
        full_name=(full_name or "").strip() or None,
        password_hash=hash_password(password),
        is_active=True,
    )
    db.add(user)
    try:
        db.flush()
        grant_role(db, user.id, ROLE_STUDENT)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already registered.")
    db.refresh(user)

    _start_session(request, user)
    log.info("registered identity %s", user.id)
    return {"ok": True, "user": _user_payload(user, False)}


@router.post("/api/login")
def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    email = (email or "").strip().lower()
    user = db.query(Identity).filter(Identity.email == email).first()
    ok, new_hash = verify_and_upgrade(password, user.password_hash if user else None)
    if not ok:
        raise AuthenticationError("Invalid credentials.")
    if not user.is_active:
        raise AuthorizationError("Account disabled.")

    if new_hash:
        user.password_hash = new_hash

    user.last_login_at = datetime.now(timezone.utc)
    write_audit(
        db, action="LOGIN", target_type="Identity", target_id=user.id,
        request=request, ctx=AuthContext(user_id=user.id, email=user.email),
    )
    db.commit()
    db.refresh(user)

    _start_session(request, user)
    return {"ok": True, "user": _user_payload(user, is_admin(db, user.id))}


@router.post("/api/logout")
def logout(request: Request):
    request.session.clear()
    return {"ok": True}


@router.get("/api/me")
def me(user: Identity = Depends(require_user), ctx: AuthContext = Depends(require_context)):
    data = _user_payload(user, ctx.is_admin)
    data["last_login_at"] = user.last_login_at
    return data
