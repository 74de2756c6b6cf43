# ncc_portal/core/errors.py
"""
Domain errors raised by the service layer.

Route handlers do not catch these; ``main.py`` registers one handler that
turns any ``PortalError`` into ``{"detail": message}`` with ``status_code``.
Messages are short and user facing, never internal detail.
"""
from __future__ import annotations

from typing import Optional


class PortalError(Exception):
    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)


class ValidationError(PortalError):
    status_code = 422
    default_message = "Invalid input."


class NotFoundError(PortalError):
    status_code = 404
    default_message = "Not found."


class ConflictError(PortalError):
    status_code = 409
    default_message = "Record already exists."


class AuthenticationError(PortalError):
    status_code = 401
    default_message = "Session expired, please sign in again."


class AuthorizationError(PortalError):
    status_code = 403
    default_message = "Access denied."


class EncryptionError(PortalError):
    status_code = 500
    default_message = "Could not secure sensitive data, nothing was saved."


class DecodeError(PortalError):
    """Ciphertext not produced by this codec's key/scheme."""
    status_code = 500
    default_message = "Could not read protected field."
