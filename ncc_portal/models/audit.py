# ncc_portal/models/audit.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from ncc_portal.db.base import Base

class AuditLog(Base):
    """Security trail: logins, profile writes, decrypted reads, admin denials."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    occurred_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)

    action = Column(String(64), nullable=False, index=True)  # STUDENT_INSERT, ADMIN_DENIED, ...
    status = Column(String(32), nullable=True)               # SUCCESS / FAILURE

    target_type = Column(String(64), nullable=True)
    target_id   = Column(String(128), nullable=True)

    # identity reference of the caller, when known
    actor_id   = Column(String(128), nullable=True, index=True)
    actor_name = Column(String(255), nullable=True)
    ip_address = Column(String(64), nullable=True)
    path       = Column(String(255), nullable=True)
    correlation_id = Column(String(64), nullable=True)

    hmac_hash = Column(String(128), nullable=False)

    # field names only, never sensitive values
    prev_values = Column(JSON, nullable=True)
    new_values  = Column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action='{self.action}', actor_id={self.actor_id})>"
