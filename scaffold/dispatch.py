"""Serving of non-API requests.

The dispatcher is chosen once when the app is built: development proxies to
the live frontend dev server (which compiles sources on the fly and drives
hot reload), production serves the compiled bundle from disk and falls back
to ``index.html`` for client-side routes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import httpx
from fastapi import Request
from starlette.background import BackgroundTask
from starlette.responses import FileResponse, Response, StreamingResponse

from scaffold.config.settings import Settings
from scaffold.errors import DevServerUnavailable

logger = logging.getLogger(__name__)

INDEX_DOCUMENT = "index.html"

# Connection-scoped headers that must not be forwarded by a proxy.
_HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "host",
    }
)


class Dispatcher(ABC):
    """Serves requests that no API route claimed."""

    @abstractmethod
    async def __call__(self, request: Request) -> Response:
        ...

    async def close(self) -> None:
        """Release resources held by the dispatcher."""


class StaticDispatcher(Dispatcher):
    """Serve precompiled assets, falling back to the entry document."""

    def __init__(self, static_dir: str | Path):
        root = Path(static_dir).resolve()
        index = root / INDEX_DOCUMENT
        if not index.is_file():
            raise RuntimeError(
                f"Could not find the build directory: {root}; build the client first"
            )
        self.root = root
        self.index = index

    def resolve(self, relative_path: str) -> Path:
        """Map a request path to a file under the build directory, or the index."""

        relative_path = relative_path.lstrip("/")
        if not relative_path:
            return self.index

        candidate = (self.root / relative_path).resolve()
        if not candidate.is_relative_to(self.root) or not candidate.is_file():
            return self.index
        return candidate

    async def __call__(self, request: Request) -> Response:
        return FileResponse(self.resolve(request.url.path))


class DevServerDispatcher(Dispatcher):
    """Reverse proxy to the frontend development server."""

    def __init__(self, target_url: str, client: Optional[httpx.AsyncClient] = None):
        self.target_url = target_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=30.0)

    async def __call__(self, request: Request) -> Response:
        headers = [
            (name, value)
            for name, value in request.headers.items()
            if name.lower() not in _HOP_BY_HOP and name.lower() != "content-length"
        ]
        upstream_request = self._client.build_request(
            request.method,
            f"{self.target_url}{request.url.path}",
            params=request.url.query or None,
            headers=headers,
            content=await request.body(),
        )
        try:
            upstream = await self._client.send(upstream_request, stream=True)
        except httpx.TransportError as exc:
            logger.warning("Dev server at %s unreachable: %s", self.target_url, exc)
            raise DevServerUnavailable(
                f"Development server at {self.target_url} is not reachable"
            ) from exc

        response_headers = {
            name: value
            for name, value in upstream.headers.items()
            if name.lower() not in _HOP_BY_HOP
        }
        return StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            headers=response_headers,
            background=BackgroundTask(upstream.aclose),
        )

    async def close(self) -> None:
        await self._client.aclose()


def build_dispatcher(
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> Dispatcher:
    """Choose the non-API dispatcher for the configured runtime mode."""

    if settings.is_production:
        logger.info("Serving client assets from %s", settings.static_dir)
        return StaticDispatcher(settings.static_dir)

    logger.info("Proxying client requests to dev server %s", settings.dev_server_url)
    return DevServerDispatcher(settings.dev_server_url, client=client)


__all__ = [
    "DevServerDispatcher",
    "Dispatcher",
    "StaticDispatcher",
    "build_dispatcher",
]
