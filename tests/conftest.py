"""Shared fixtures: an app wired to in-memory stores and a mocked dev server."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
import sys

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from scaffold.config.settings import Settings  # noqa: E402
from scaffold.main import create_app  # noqa: E402
from scaffold.middleware.logging import logger as request_logger  # noqa: E402

DEV_SERVER_URL = "http://dev.test"
PASSWORD = "correct-horse-battery"


class _ChunkedBody(httpx.AsyncByteStream):
    """Response body that is only read when the proxy iterates it."""

    def __init__(self, *chunks: bytes) -> None:
        self._chunks = chunks

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk


def dev_server(request: httpx.Request) -> httpx.Response:
    """Stand-in for the frontend dev server."""

    return httpx.Response(
        200,
        stream=_ChunkedBody(b"<!-- dev:", request.url.path.encode(), b" -->"),
        headers={"content-type": "text/html"},
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        app_env="development",
        log_file=str(tmp_path / "logs" / "app.log"),
        session_secret="test-secret",
        session_store="memory",
        session_sweep_interval_seconds=0,
        dev_server_url=DEV_SERVER_URL,
    )


@pytest.fixture
def app(settings: Settings):
    client = httpx.AsyncClient(transport=httpx.MockTransport(dev_server))
    return create_app(settings, dev_client=client)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def principal(app):
    """A registered principal named ``alice``."""

    return asyncio.run(app.state.auth.register("alice", PASSWORD, "Alice"))


@pytest.fixture
def request_log(caplog: pytest.LogCaptureFixture):
    """Capture request log lines even when the logger does not propagate."""

    caplog.set_level(logging.INFO, logger=request_logger.name)
    request_logger.addHandler(caplog.handler)
    yield caplog
    request_logger.removeHandler(caplog.handler)


def request_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == request_logger.name]
