"""Service layer."""

from .auth import AuthenticationManager

__all__ = ["AuthenticationManager"]
