"""Liveness endpoint."""

from fastapi import APIRouter

from scaffold.views import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Always 200; touches neither the session store nor the dispatcher."""

    return HealthResponse(ok=True)
