# ncc_portal/main.py
import logging
import uuid
from time import time as _now

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import JSONResponse

from ncc_portal.core.config import settings
from ncc_portal.core.crypto import get_codec
from ncc_portal.core.errors import PortalError
from ncc_portal.db.session import SessionLocal, init_db
from ncc_portal.routers import admin, auth, health, students
from ncc_portal.services.audit import write_audit

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("app")

app = FastAPI(title="NCC Student Portal")

# ---------------- Idle timeout ----------------
WHITELIST_PREFIXES = (
    "/api/login", "/api/logout", "/api/register",
    "/api/health",
)

@app.middleware("http")
async def idle_timeout_middleware(request: Request, call_next):
    path = request.url.path
    if path.startswith(WHITELIST_PREFIXES) or "session" not in request.scope:
        return await call_next(request)

    sess = request.session
    if sess.get("uid"):
        now = int(_now())
        last = int(sess.get("_last_seen") or 0)
        if last and now - last > settings.IDLE_TIMEOUT_SEC:
            sess.clear()
            return JSONResponse(
                {"detail": "Session expired, please sign in again."},
                status_code=401,
                headers={"X-Session-Expired": "1"},
            )
        sess["_last_seen"] = now

    return await call_next(request)

# ---------------- Correlation-ID ----------------
# Registered after idle timeout so it wraps it: the 401 carries the header too
@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    cid = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = cid
    resp = await call_next(request)
    resp.headers["X-Correlation-ID"] = cid
    return resp

# Added last so it wraps the http middlewares above (they read request.session)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
)

# ---------------- Error handlers ----------------
@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    body = {"detail": exc.message}
    if exc.field:
        body["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    msg = str(first.get("msg") or "Invalid input.")
    # pydantic prefixes custom validator messages
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    loc = first.get("loc") or ()
    body = {"detail": msg}
    if len(loc) > 1:
        body["field"] = str(loc[-1])
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log.exception("unhandled error on %s", request.url.path)
    db = SessionLocal()
    try:
        write_audit(
            db,
            action="EXCEPTION",
            target_type="System",
            status="FAILURE",
            new_values={"path": request.url.path, "error": type(exc).__name__},
            request=request,
        )
        db.commit()
    except Exception:
        log.exception("could not write EXCEPTION audit row")
        db.rollback()
    finally:
        db.close()
    return JSONResponse(status_code=500, content={"detail": "Something went wrong. Please try again."})

# ---------------- Mount routers ----------------
app.include_router(auth.router,     tags=["Auth"])
app.include_router(health.router,   prefix="/api", tags=["Health"])
app.include_router(students.router, prefix="/api")
app.include_router(admin.router,    prefix="/api")

# ---------------- Startup ----------------
@app.on_event("startup")
def startup():
    init_db()
    get_codec()  # load the field key once, before the first request
