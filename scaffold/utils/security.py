"""Security helpers for password hashing and session token handling."""

from __future__ import annotations

import base64
import hashlib
import hmac
import os
import secrets
from typing import Optional

_SALT_BYTES = 16
_ITERATIONS = 120_000
_TOKEN_BYTES = 32
_SIGNATURE_SEPARATOR = "."


def hash_password(password: str) -> str:
    """Return a salted PBKDF2 hash for the supplied password."""

    salt = os.urandom(_SALT_BYTES)
    derived = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        _ITERATIONS,
    )
    return base64.b64encode(salt + derived).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check whether the provided password matches the stored hash."""

    try:
        decoded = base64.b64decode(hashed.encode("utf-8"), validate=True)
    except (ValueError, TypeError):
        return False

    salt = decoded[:_SALT_BYTES]
    stored = decoded[_SALT_BYTES:]
    candidate = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        _ITERATIONS,
    )
    return hmac.compare_digest(candidate, stored)


# Verified against when the identifier is unknown so both failure paths cost
# one PBKDF2 round.
DUMMY_PASSWORD_HASH = hash_password(secrets.token_urlsafe(16))


def generate_session_token() -> str:
    """Return a new unguessable session identifier."""

    return secrets.token_urlsafe(_TOKEN_BYTES)


def _signature(token: str, secret: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"),
        token.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def sign_token(token: str, secret: str) -> str:
    """Append an HMAC signature so the client cannot forge session ids."""

    return f"{token}{_SIGNATURE_SEPARATOR}{_signature(token, secret)}"


def unsign_token(value: str, secret: str) -> Optional[str]:
    """Return the bare token when the signature checks out, else ``None``."""

    token, separator, signature = value.rpartition(_SIGNATURE_SEPARATOR)
    if not separator or not token or not signature:
        return None
    if not hmac.compare_digest(signature, _signature(token, secret)):
        return None
    return token


__all__ = [
    "DUMMY_PASSWORD_HASH",
    "generate_session_token",
    "hash_password",
    "sign_token",
    "unsign_token",
    "verify_password",
]
