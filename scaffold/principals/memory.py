"""Process-local principal store used alongside the in-memory session store."""

from __future__ import annotations

from itertools import count
from typing import Optional

from scaffold.errors import Conflict

from .base import Principal, PrincipalStore


class InMemoryPrincipalStore(PrincipalStore):
    def __init__(self) -> None:
        self._by_id: dict[int, Principal] = {}
        self._ids = count(1)

    async def get_by_id(self, principal_id: int) -> Optional[Principal]:
        return self._by_id.get(principal_id)

    async def get_by_username(self, username: str) -> Optional[Principal]:
        for principal in self._by_id.values():
            if principal.username == username:
                return principal
        return None

    async def create(
        self,
        username: str,
        password_hash: str,
        display_name: Optional[str] = None,
    ) -> Principal:
        if await self.get_by_username(username) is not None:
            raise Conflict("Username already registered")
        principal = Principal(
            id=next(self._ids),
            username=username,
            password_hash=password_hash,
            display_name=display_name,
        )
        self._by_id[principal.id] = principal
        return principal


__all__ = ["InMemoryPrincipalStore"]
