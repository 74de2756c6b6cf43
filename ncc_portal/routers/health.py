# ncc_portal/routers/health.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.responses import JSONResponse

from ncc_portal.core.config import settings
from ncc_portal.db.session import get_db

log = logging.getLogger("health")

router = APIRouter()


@router.get("/health")
def health():
    """Liveness. Reports whether a persistent field key is configured, never the key."""
    return {
        "ok": True,
        "time": datetime.now(timezone.utc).isoformat(),
        "field_key": "configured" if settings.FIELD_ENCRYPTION_KEY else "ephemeral",
    }


@router.get("/health/db")
def health_db(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1")).scalar_one()
    except SQLAlchemyError as e:
        log.error("db health check failed: %s", e.__class__.__name__)
        return JSONResponse(status_code=503, content={"ok": False, "db": "unavailable"})
    return {"ok": True, "db": "ok"}
