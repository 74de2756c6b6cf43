# ncc_portal/db/session.py
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.engine.url import make_url

from .base import Base
from ..core.config import settings

log = logging.getLogger("db")

DB_URL = settings.DB_URL

def _make_engine(url_str: str):
    url = make_url(url_str)
    connect_args = {}
    if url.get_backend_name().startswith("sqlite"):
        connect_args["check_same_thread"] = False
    elif url.get_backend_name().startswith("mysql"):
        connect_args["charset"] = "utf8mb4"

    return create_engine(
        url_str,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_recycle=3600,
        future=True,
    )

engine = _make_engine(DB_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

def init_db():
    """Create missing tables."""
    # models must be imported so their tables are registered on Base.metadata
    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    log.info("DB init OK with %s", make_url(DB_URL).render_as_string(hide_password=True))

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
