# ncc_portal/models/student.py
import uuid

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Enum, ForeignKey, Text, func
)
from ncc_portal.db.base import Base

NCC_WINGS = ("air", "army", "navy")
EXPERIENCE_KINDS = ("placement", "internship")

# (plaintext column, encrypted column) for every protected field
SENSITIVE_FIELDS = {
    "aadhaar_number": "aadhaar_encrypted",
    "pan_number": "pan_encrypted",
    "account_number": "account_number_encrypted",
}


def _uuid() -> str:
    return str(uuid.uuid4())


# ================= Student =================
class Student(Base):
    __tablename__ = "students"

    student_id = Column(String(36), primary_key=True, default=_uuid)
    # exactly one student per identity
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False, index=True)

    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    branch = Column(String(100), nullable=True)
    year = Column(Integer, nullable=True)
    address = Column(String(500), nullable=True)
    phone_number = Column(String(10), nullable=True)
    parents_phone_number = Column(String(10), nullable=True)

    # plaintext copies (admin listing) + ciphertext (decrypted read path).
    # Both of a pair are always written by the same commit.
    aadhaar_number = Column(String(12), nullable=True)
    aadhaar_encrypted = Column(Text, nullable=True)
    pan_number = Column(String(10), nullable=True)
    pan_encrypted = Column(Text, nullable=True)
    account_number = Column(String(20), nullable=True)
    account_number_encrypted = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        # no sensitive columns here
        return f"<Student(student_id={self.student_id}, user_id={self.user_id}, name='{self.name}')>"


# ================= NCC enrollment =================
class NccDetail(Base):
    __tablename__ = "ncc_details"

    ncc_id = Column(String(36), primary_key=True, default=_uuid)
    student_id = Column(String(36), ForeignKey("students.student_id"), nullable=False, index=True)

    ncc_wing = Column(Enum(*NCC_WINGS, name="ncc_wing_type"), nullable=False)
    regimental_number = Column(String(50), nullable=True)
    cadet_rank = Column(String(50), nullable=True)
    enrollment_date = Column(Date, nullable=True)

    created_at = Column(DateTime, server_default=func.now())


# ================= Placements / internships =================
class ExperienceRecord(Base):
    __tablename__ = "placements_internships"

    experience_id = Column(String(36), primary_key=True, default=_uuid)
    student_id = Column(String(36), ForeignKey("students.student_id"), nullable=False, index=True)

    experience = Column(Enum(*EXPERIENCE_KINDS, name="experience_type"), nullable=False)
    company_name = Column(String(100), nullable=False)
    role = Column(String(100), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)  # NULL = ongoing

    created_at = Column(DateTime, server_default=func.now())
