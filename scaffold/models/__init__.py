"""SQLAlchemy models for the session and principal tables."""

from .base import Base
from .principal import PrincipalRow  # noqa: F401
from .session import SessionRow  # noqa: F401

__all__ = ["Base", "PrincipalRow", "SessionRow"]
