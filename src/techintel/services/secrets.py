"""
techintel.services.secrets

Secret-store helpers for `api_secrets`.

Responsibilities:
- Mask raw API keys for display (`sk-...abc123`).
- Encrypt keys at rest with Fernet.
"""

from __future__ import annotations

import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet

from techintel.settings import Settings


class EncryptionError(Exception):
    pass


def mask_key(key: str) -> str:
    if len(key) < 10:
        return "***"
    return f"{key[:3]}...{key[-6:]}"


@lru_cache(maxsize=4)
def _fernet(key: str) -> Fernet:
    try:
        return Fernet(key.encode())
    except ValueError as e:
        raise EncryptionError(f"invalid encryption key: {e}") from e


def get_fernet(settings: Settings) -> Fernet:
    if settings.secrets_encryption_key:
        return _fernet(settings.secrets_encryption_key)
    if settings.env == "prod":
        raise EncryptionError("TI_SECRETS_ENCRYPTION_KEY missing")
    # Dev/test: stable key derived from the JWT secret so restarts can still decrypt.
    derived = base64.urlsafe_b64encode(hashlib.sha256(settings.jwt_secret.encode()).digest())
    return _fernet(derived.decode())


def encrypt_secret(settings: Settings, value: str) -> str:
    return get_fernet(settings).encrypt(value.encode()).decode()


__all__ = ["EncryptionError", "encrypt_secret", "get_fernet", "mask_key"]
