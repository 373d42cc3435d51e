"""Utility helpers for the scaffold backend."""

from .security import (
    DUMMY_PASSWORD_HASH,
    generate_session_token,
    hash_password,
    sign_token,
    unsign_token,
    verify_password,
)

__all__ = [
    "DUMMY_PASSWORD_HASH",
    "generate_session_token",
    "hash_password",
    "sign_token",
    "unsign_token",
    "verify_password",
]
