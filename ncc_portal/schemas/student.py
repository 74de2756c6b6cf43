# ncc_portal/schemas/student.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_REGEX = re.compile(r"^[0-9]{10}$")
AADHAAR_REGEX = re.compile(r"^[0-9]{12}$")
PAN_REGEX = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")


def _blank_to_none(v):
    """Trim strings; empty string means 'not provided'."""
    if v is None:
        return None
    if isinstance(v, str):
        s = v.strip()
        return s or None
    return v


# ========= Profile write (insert/update share one payload) =========
class StudentIn(BaseModel):
    name: str = Field(max_length=100)
    email: str = Field(max_length=255)

    branch: Optional[str] = Field(default=None, max_length=100)
    year: Optional[int] = None
    address: Optional[str] = Field(default=None, max_length=500)
    phone_number: Optional[str] = None
    parents_phone_number: Optional[str] = None

    # sensitive: encrypted at rest
    aadhaar_number: Optional[str] = None
    pan_number: Optional[str] = None
    account_number: Optional[str] = None

    # ---- Validators ----
    @field_validator("name", "email", mode="before")
    @classmethod
    def _strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "branch", "year", "address", "phone_number", "parents_phone_number",
        "aadhaar_number", "pan_number", "account_number",
        mode="before",
    )
    @classmethod
    def _normalize_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v):
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def _validate_email(cls, v):
        if not EMAIL_REGEX.fullmatch(v or ""):
            raise ValueError("Invalid email address")
        return v

    @field_validator("year")
    @classmethod
    def _validate_year(cls, v):
        if v is not None and not 1 <= v <= 5:
            raise ValueError("Year must be between 1 and 5")
        return v

    @field_validator("phone_number")
    @classmethod
    def _validate_phone(cls, v):
        if v is not None and not PHONE_REGEX.fullmatch(v):
            raise ValueError("Phone number must be exactly 10 digits")
        return v

    @field_validator("parents_phone_number")
    @classmethod
    def _validate_parents_phone(cls, v):
        if v is not None and not PHONE_REGEX.fullmatch(v):
            raise ValueError("Parent's phone number must be exactly 10 digits")
        return v

    @field_validator("aadhaar_number")
    @classmethod
    def _validate_aadhaar(cls, v):
        if v is not None and not AADHAAR_REGEX.fullmatch(v):
            raise ValueError("Aadhaar must be exactly 12 digits")
        return v

    @field_validator("pan_number")
    @classmethod
    def _validate_pan(cls, v):
        if v is not None and not PAN_REGEX.fullmatch(v):
            raise ValueError("PAN format must be: ABCDE1234F")
        return v

    @field_validator("account_number")
    @classmethod
    def _validate_account(cls, v):
        if v is not None and not 8 <= len(v) <= 20:
            raise ValueError("Account number must be 8 to 20 characters")
        return v


class StudentCreated(BaseModel):
    student_id: str


# ========= Own profile, decrypted =========
class StudentDecryptedOut(BaseModel):
    student_id: str
    user_id: str
    name: str
    email: str
    branch: Optional[str] = None
    year: Optional[int] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    parents_phone_number: Optional[str] = None
    aadhaar_number: Optional[str] = None
    pan_number: Optional[str] = None
    account_number: Optional[str] = None
    created_at: Optional[datetime] = None

    # All contact fields, Aadhaar or PAN, and an account number present
    profile_complete: bool = False


# ========= Admin listing (plaintext columns only) =========
class StudentListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: str
    user_id: str
    name: str
    email: str
    branch: Optional[str] = None
    year: Optional[int] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    parents_phone_number: Optional[str] = None
    aadhaar_number: Optional[str] = None
    pan_number: Optional[str] = None
    account_number: Optional[str] = None
    created_at: Optional[datetime] = None
