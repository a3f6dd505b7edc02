"""Root router: health endpoints plus the discovered ``/api/v1`` modules."""

import asyncio
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from onboardkit import __version__
from onboardkit.api.dependencies import DBSession
from onboardkit.modules import discover_modules


REMOTE_SERVICES = ("provisioning", "identity", "notifier")


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    """``checks`` maps each dependency to ``ok`` or the failure kind."""

    status: str
    checks: dict[str, str]


health_router = APIRouter(tags=["health"])


@health_router.get("/health/live", response_model=HealthResponse, summary="Liveness probe")
async def liveness() -> HealthResponse:
    return HealthResponse(status="alive")


@health_router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Answers 503 while the tenant store is unreachable or slower than the "
    "slug check timeout, since every onboarding operation fails closed on it.",
)
async def readiness(request: Request, db: DBSession) -> JSONResponse:
    settings = request.app.state.settings
    checks: dict[str, str] = {}

    try:
        await asyncio.wait_for(
            db.execute(text("SELECT 1")), timeout=settings.store_query_timeout_seconds
        )
        checks["tenant_store"] = "ok"
    except TimeoutError:
        checks["tenant_store"] = "timeout"
    except Exception as e:
        checks["tenant_store"] = type(e).__name__

    clients = getattr(request.app.state, "clients", None)
    checks["remote_clients"] = "ok" if clients is not None else "missing"

    ready = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )


@health_router.get("/info", summary="Application info")
async def info(request: Request) -> dict[str, Any]:
    settings = request.app.state.settings
    return {
        "app": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "remote_services": list(REMOTE_SERVICES),
    }


api_router = APIRouter()
v1_router = APIRouter(prefix="/api/v1")
for module_router in discover_modules():
    v1_router.include_router(module_router)

api_router.include_router(health_router)
api_router.include_router(v1_router)
