# ncc_portal/schemas/records.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

NccWing = Literal["air", "army", "navy"]
ExperienceKind = Literal["placement", "internship"]


def _blank_to_none(v):
    if isinstance(v, str):
        s = v.strip()
        return s or None
    return v


# ========= NCC =========
class NccDetailIn(BaseModel):
    ncc_wing: NccWing
    regimental_number: Optional[str] = Field(default=None, max_length=50)
    cadet_rank: Optional[str] = Field(default=None, max_length=50)
    enrollment_date: Optional[date] = None

    @field_validator("regimental_number", "cadet_rank", "enrollment_date", mode="before")
    @classmethod
    def _normalize(cls, v):
        return _blank_to_none(v)


class NccDetailOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ncc_id: str
    student_id: str
    ncc_wing: NccWing
    regimental_number: Optional[str] = None
    cadet_rank: Optional[str] = None
    enrollment_date: Optional[date] = None
    created_at: Optional[datetime] = None


class NccDetailAdminOut(NccDetailOut):
    student_name: Optional[str] = None
    student_email: Optional[str] = None


# ========= Placements / internships =========
class ExperienceIn(BaseModel):
    experience: ExperienceKind
    company_name: str = Field(max_length=100)
    role: Optional[str] = Field(default=None, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("company_name", mode="before")
    @classmethod
    def _strip_company(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("company_name")
    @classmethod
    def _require_company(cls, v):
        if not v:
            raise ValueError("Company name is required")
        return v

    @field_validator("role", "start_date", "end_date", mode="before")
    @classmethod
    def _normalize(cls, v):
        return _blank_to_none(v)


class ExperienceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    experience_id: str
    student_id: str
    experience: ExperienceKind
    company_name: str
    role: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None


class ExperienceAdminOut(ExperienceOut):
    student_name: Optional[str] = None
    student_email: Optional[str] = None
