# ncc_portal/core/security.py
"""
Password handling for local identities.

Hashes are bcrypt (passlib) over ``password + PASSWORD_PEPPER``. The pepper
lives only in settings, so a leaked ``users`` table alone is not enough for
an offline attack. Registration runs ``check_password_policy`` before hashing.
"""
from typing import Optional

from passlib.context import CryptContext

from .config import settings
from .errors import ValidationError

MIN_PASSWORD_LEN = 8
# bcrypt ignores input past 72 bytes; longer passwords would silently collide
MAX_PASSWORD_BYTES = 72

password_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def _peppered(plain: str) -> str:
    return plain + (settings.PASSWORD_PEPPER or "")


def check_password_policy(password: Optional[str]) -> str:
    """Return the password unchanged or raise ValidationError(field="password")."""
    password = password or ""
    if len(password) < MIN_PASSWORD_LEN:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LEN} characters", field="password"
        )
    if len(_peppered(password).encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError("Password is too long", field="password")
    if password.strip() != password:
        raise ValidationError("Password must not start or end with spaces", field="password")
    return password


def hash_password(password: str) -> str:
    return password_context.hash(_peppered(password))


def verify_and_upgrade(password: str, stored_hash: Optional[str]) -> tuple:
    """
    ``(ok, new_hash)``. ``new_hash`` is set only when the password matched and
    the stored hash was made under an older policy (fewer rounds).
    Unknown or malformed hashes count as a mismatch.
    """
    if not stored_hash:
        return False, None
    try:
        ok, new_hash = password_context.verify_and_update(_peppered(password), stored_hash)
    except ValueError:
        return False, None
    return ok, new_hash
