# ncc_portal/core/crypto.py
"""
Field-level AES-256-GCM codec for the sensitive student columns
(Aadhaar, PAN, bank account number).

Token layout: ``enc::`` + urlsafe base64 of ``nonce(12) || ciphertext+tag``.
A fresh nonce is drawn per value, so encrypting the same plaintext twice
gives two different tokens.
"""
from __future__ import annotations

import base64
import binascii
import logging
import os
import secrets
from functools import lru_cache
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .config import settings
from .errors import DecodeError, EncryptionError

log = logging.getLogger("crypto")

NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32
TOKEN_PREFIX = "enc::"


def generate_key() -> str:
    """New urlsafe base64 key, suitable for FIELD_ENCRYPTION_KEY."""
    return base64.urlsafe_b64encode(secrets.token_bytes(KEY_SIZE)).decode("utf-8")


def decode_key(raw: str) -> bytes:
    try:
        key = base64.urlsafe_b64decode(raw.encode("utf-8"))
    except (binascii.Error, ValueError):
        raise ValueError("FIELD_ENCRYPTION_KEY is not valid base64") from None
    if len(key) != KEY_SIZE:
        raise ValueError("FIELD_ENCRYPTION_KEY must be 32 bytes after base64 decode")
    return key


class FieldCodec:
    """Immutable after construction; one instance is shared by all requests."""

    __slots__ = ("_aes",)

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ValueError("AES-256 key must be 32 bytes")
        self._aes = AESGCM(key)

    def __repr__(self) -> str:
        return "<FieldCodec aes-256-gcm>"

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        if plaintext is None or plaintext == "":
            return None
        try:
            nonce = os.urandom(NONCE_SIZE)
            ct = self._aes.encrypt(nonce, plaintext.encode("utf-8"), None)
        except (TypeError, ValueError, AttributeError, OverflowError) as e:
            raise EncryptionError() from e
        token = base64.urlsafe_b64encode(nonce + ct).decode("utf-8")
        return f"{TOKEN_PREFIX}{token}"

    def decrypt(self, token: Optional[str]) -> Optional[str]:
        if token is None:
            return None
        if not isinstance(token, str) or not token.startswith(TOKEN_PREFIX):
            raise DecodeError()
        try:
            raw = base64.urlsafe_b64decode(token[len(TOKEN_PREFIX):].encode("utf-8"))
        except (binascii.Error, ValueError):
            raise DecodeError() from None
        if len(raw) < NONCE_SIZE + TAG_SIZE:
            raise DecodeError()
        nonce, ct = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
        try:
            return self._aes.decrypt(nonce, ct, None).decode("utf-8")
        except (InvalidTag, UnicodeDecodeError):
            raise DecodeError() from None


@lru_cache(maxsize=1)
def get_codec() -> FieldCodec:
    """Process-wide codec built from settings on first use."""
    raw = (settings.FIELD_ENCRYPTION_KEY or "").strip()
    if not raw:
        log.warning(
            "FIELD_ENCRYPTION_KEY not set; using an ephemeral key. "
            "Encrypted fields written now will not be readable after restart."
        )
        raw = generate_key()
    return FieldCodec(decode_key(raw))
