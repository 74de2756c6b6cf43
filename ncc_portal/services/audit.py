# ncc_portal/services/audit.py
from __future__ import annotations

import json
import hmac
import hashlib
from typing import Optional, Any, Dict

from fastapi import Request
from sqlalchemy.orm import Session

from ncc_portal.core.config import settings
from ncc_portal.core.context import AuthContext
from ncc_portal.models.audit import AuditLog


def _norm_json(val: Any) -> Dict[str, Any]:
    """
    Normalise prev_values/new_values into a dict for the JSON column.
    - None -> {}
    - dict -> as is
    - JSON string -> parsed
    - anything else -> {"_raw": ...}
    """
    if val is None:
        return {}
    if isinstance(val, dict):
        return val
    if isinstance(val, str):
        try:
            parsed = json.loads(val)
            return parsed if isinstance(parsed, dict) else {"_raw": parsed}
        except ValueError:
            return {"_raw": val}
    return {"_raw": val}


def _build_hmac_hash(
    *,
    action: str,
    status: Optional[str],
    target_type: Optional[str],
    target_id: Optional[str],
    correlation_id: Optional[str],
    prev_values: Dict[str, Any],
    new_values: Dict[str, Any],
) -> str:
    """HMAC-SHA256 over the normalised audit payload."""
    payload = {
        "action": action or "",
        "status": status or "",
        "target_type": target_type or "",
        "target_id": str(target_id or ""),
        "correlation_id": correlation_id or "",
        "prev_values": prev_values,
        "new_values": new_values,
    }
    raw = json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
    return hmac.new(settings.AUDIT_HMAC_SECRET.encode("utf-8"), raw.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_audit(row: AuditLog) -> bool:
    """True when the row still matches its stored signature."""
    expected = _build_hmac_hash(
        action=row.action,
        status=row.status,
        target_type=row.target_type,
        target_id=row.target_id,
        correlation_id=row.correlation_id,
        prev_values=_norm_json(row.prev_values),
        new_values=_norm_json(row.new_values),
    )
    return hmac.compare_digest(expected, row.hmac_hash or "")


def write_audit(
    db: Session,
    *,
    action: str,
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
    status: str = "SUCCESS",
    prev_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
    ctx: Optional[AuthContext] = None,
) -> AuditLog:
    """
    Stage one audit row. Does not commit (the caller owns the transaction).
    Never pass sensitive values in prev/new; field names only.
    """
    actor_id = ctx.user_id if ctx else None
    actor_name = ctx.email if ctx else None
    if actor_id is None and request is not None and "session" in request.scope:
        sess = request.session
        actor_id = sess.get("uid")
        actor_name = sess.get("email") or actor_id

    ip = request.client.host if (request and request.client) else None
    path = request.url.path if request else None
    cid = getattr(request.state, "correlation_id", None) if request else None

    prev_j = _norm_json(prev_values)
    new_j = _norm_json(new_values)

    h = _build_hmac_hash(
        action=action,
        status=status,
        target_type=target_type,
        target_id=target_id,
        correlation_id=cid,
        prev_values=prev_j,
        new_values=new_j,
    )

    row = AuditLog(
        action=action,
        status=status,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        prev_values=prev_j,
        new_values=new_j,
        actor_id=str(actor_id) if actor_id is not None else None,
        actor_name=str(actor_name) if actor_name is not None else None,
        ip_address=ip,
        path=path,
        correlation_id=cid,
        hmac_hash=h,
    )
    db.add(row)
    return row
