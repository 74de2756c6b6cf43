# Aggregator: allows "from ncc_portal.models import Student, NccDetail, ..."

from ncc_portal.db.base import Base

from .user import Identity, RoleAssignment
from .student import Student, NccDetail, ExperienceRecord
from .audit import AuditLog

__all__ = [
    "Base",
    "Identity",
    "RoleAssignment",
    "Student",
    "NccDetail",
    "ExperienceRecord",
    "AuditLog",
]
