from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Principal(BaseModel):
    """Authenticated identity a session may be bound to."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    username: str
    password_hash: str
    display_name: Optional[str] = None


class PrincipalStore(ABC):
    """Persistence contract for principals"""

    @abstractmethod
    async def get_by_id(self, principal_id: int) -> Optional[Principal]:
        ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[Principal]:
        ...

    @abstractmethod
    async def create(
        self,
        username: str,
        password_hash: str,
        display_name: Optional[str] = None,
    ) -> Principal:
        """Persist a new principal; raises ``Conflict`` for a taken username."""


__all__ = ["Principal", "PrincipalStore"]
