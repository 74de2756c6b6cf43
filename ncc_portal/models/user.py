import uuid

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Enum, ForeignKey, func
from ncc_portal.db.base import Base

ROLE_ADMIN = "admin"
ROLE_STUDENT = "student"
APP_ROLES = (ROLE_ADMIN, ROLE_STUDENT)


def _uuid() -> str:
    return str(uuid.uuid4())


class Identity(Base):
    """Sign-in identity. ``id`` is the identity reference used everywhere else."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(128))
    is_active = Column(Boolean, nullable=False, default=True)

    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Identity(id={self.id}, email='{self.email}')>"


class RoleAssignment(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(Enum(*APP_ROLES, name="app_role"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self) -> str:
        return f"<RoleAssignment(user_id={self.user_id}, role='{self.role}')>"
