"""Periodic removal of expired sessions."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from scaffold.errors import StoreUnavailable
from scaffold.telemetry import record_sweep

from .base import SessionStore

logger = logging.getLogger(__name__)


class SessionSweeper:
    """Background task calling ``sweep_expired`` on a fixed cadence."""

    def __init__(self, store: SessionStore, interval_seconds: float):
        self._store = store
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._interval <= 0 or self.running:
            return
        self._task = asyncio.create_task(self._run(), name="session-sweeper")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def sweep_once(self) -> int:
        removed = await self._store.sweep_expired()
        record_sweep(removed)
        if removed:
            logger.info("Swept %d expired session(s)", removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.sweep_once()
            except StoreUnavailable:
                logger.warning("Session sweep skipped; store unavailable")
            except Exception:
                logger.exception("Session sweep failed")


__all__ = ["SessionSweeper"]
