"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.routing import Match

from .config.settings import Settings, get_settings
from .controllers import auth, health
from .database import create_engine, create_session_factory, dispose_engine, init_models
from .dispatch import build_dispatcher
from .errors import MethodNotAllowed, NotFound
from .middleware import (
    ErrorNormalizerMiddleware,
    RequestLoggingMiddleware,
    register_exception_handlers,
)
from .principals import build_principal_store
from .services import AuthenticationManager
from .sessions import SessionSweeper, build_session_store

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_CLIENT_METHODS = ["GET", "HEAD"]


def configure_logging(settings: Settings) -> None:
    """Stream application logs to stdout and a rotating file."""

    logging.getLogger().handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    log_path = Path(settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    # Request lines go to stdout bare, already colored by the middleware.
    request_logger = logging.getLogger("scaffold.middleware.requests")
    request_logger.handlers.clear()
    request_stdout = logging.StreamHandler(sys.stdout)
    request_stdout.setFormatter(
        logging.Formatter("%(asctime)s [%(name)s] %(message)s", "%I:%M:%S %p")
    )
    request_logger.addHandler(request_stdout)
    request_logger.setLevel(logging.INFO)
    request_logger.propagate = False

    for name in ("sqlalchemy.engine", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _claimed_by_other_method(app: FastAPI, request: Request) -> bool:
    """True when an earlier route owns this path but not this method."""

    for route in app.router.routes:
        if getattr(route, "name", None) == "serve_client":
            continue
        match, _ = route.matches(request.scope)
        if match is Match.PARTIAL:
            return True
    return False


def create_app(
    settings: Optional[Settings] = None,
    *,
    dev_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Every runtime decision (session backend, non-API dispatch mode) is made
    here, once, from ``settings``.
    """

    settings = settings or get_settings()
    configure_logging(settings)

    engine = None
    session_factory = None
    if settings.session_store == "database":
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)

    session_store = build_session_store(settings, session_factory)
    principal_store = build_principal_store(settings, session_factory)
    auth_manager = AuthenticationManager(
        session_store,
        principal_store,
        session_ttl=settings.session_ttl_seconds,
        expiry_policy=settings.session_expiry,
    )
    sweeper = SessionSweeper(session_store, settings.session_sweep_interval_seconds)
    dispatcher = build_dispatcher(settings, client=dev_client)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.auth = auth_manager
    app.state.session_store = session_store
    app.state.sweeper = sweeper
    app.state.dispatcher = dispatcher

    register_exception_handlers(app)
    app.add_middleware(ErrorNormalizerMiddleware)
    app.add_middleware(RequestLoggingMiddleware, api_prefix=settings.api_prefix)

    app.include_router(health.router)
    app.include_router(auth.router, prefix=settings.api_prefix)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Registered last so every API route is matched before the catch-all.
    @app.api_route(
        "/{full_path:path}", methods=_CLIENT_METHODS, include_in_schema=False
    )
    async def serve_client(request: Request, full_path: str) -> Response:
        if _claimed_by_other_method(app, request):
            raise MethodNotAllowed()
        if settings.is_api_path(request.url.path):
            raise NotFound()
        return await dispatcher(request)

    @app.on_event("startup")
    async def startup_event() -> None:
        if engine is not None:
            await init_models(engine)
        sweeper.start()
        logger.info(
            "Started in %s mode with the %s session store",
            settings.app_env.value,
            settings.session_store,
        )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await sweeper.stop()
        await dispatcher.close()
        if engine is not None:
            await dispose_engine(engine)

    return app


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "scaffold.main:create_app",
        factory=True,
        host=_settings.host,
        port=_settings.port,
        reload=not _settings.is_production,
    )
