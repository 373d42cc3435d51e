"""Session record and the persistence contract every store backend honours."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from scaffold.config.settings import ExpiryPolicy


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Session:
    """Server-side record binding an opaque token to an authentication state."""

    id: str
    created_at: datetime
    last_access_at: datetime
    expires_at: datetime
    ttl: int
    policy: ExpiryPolicy = ExpiryPolicy.SLIDING
    principal_id: Optional[int] = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        session_id: str,
        *,
        ttl: int,
        policy: ExpiryPolicy,
        principal_id: Optional[int] = None,
        data: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> "Session":
        now = now or utcnow()
        return cls(
            id=session_id,
            created_at=now,
            last_access_at=now,
            expires_at=now + timedelta(seconds=ttl),
            ttl=ttl,
            policy=policy,
            principal_id=principal_id,
            data=dict(data or {}),
        )

    @property
    def is_authenticated(self) -> bool:
        return self.principal_id is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def touch(self, now: Optional[datetime] = None) -> None:
        """Record an access; sliding sessions also push their expiry forward."""

        now = now or utcnow()
        self.last_access_at = now
        if self.policy is ExpiryPolicy.SLIDING:
            self.expires_at = now + timedelta(seconds=self.ttl)

    def copy(self) -> "Session":
        return replace(self, data=copy.deepcopy(self.data))


class SessionStore(ABC):
    """Persistence contract for sessions.

    ``get`` returns ``None`` for absent or expired ids and never raises for
    those cases. Backend connectivity failures surface as
    :class:`scaffold.errors.StoreUnavailable`.
    """

    @abstractmethod
    async def get(self, session_id: str) -> Optional[Session]:
        ...

    @abstractmethod
    async def put(self, session: Session) -> None:
        ...

    @abstractmethod
    async def touch(self, session: Session) -> bool:
        """Persist the access times of an existing session.

        Never inserts. Returns ``False`` when the session is no longer stored,
        so a concurrent delete wins over a touch.
        """

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        ...

    @abstractmethod
    async def sweep_expired(self) -> int:
        """Remove every expired session and return how many were removed."""

    async def close(self) -> None:
        """Release backend resources."""


__all__ = ["Session", "SessionStore", "utcnow"]
