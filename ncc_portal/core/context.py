# ncc_portal/core/context.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthContext:
    """Who is calling. Built per request and passed into every service call."""

    user_id: str
    email: Optional[str] = None
    is_admin: bool = False
