"""FastAPI routers acting as controllers."""

from . import auth, health

__all__ = ["auth", "health"]
