"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from onboardkit import __version__
from onboardkit.api import api_router
from onboardkit.config import Settings, get_settings
from onboardkit.core.context import RemoteClients
from onboardkit.core.database import build_engine, build_session_factory
from onboardkit.core.errors import register_exception_handlers
from onboardkit.core.logging import (
    RequestIdMiddleware,
    RequestLoggingMiddleware,
    configure_logging,
)


logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Creates the store engine and the remote service clients on startup and
    releases them on shutdown. Objects already placed on ``app.state`` (by
    tests, for instance) are left alone.
    """
    settings: Settings = app.state.settings
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
    )

    owned_engine = None
    if getattr(app.state, "session_factory", None) is None:
        owned_engine = build_engine(settings)
        app.state.session_factory = build_session_factory(owned_engine)

    owned_clients = None
    if getattr(app.state, "clients", None) is None:
        owned_clients = RemoteClients.from_settings(settings)
        app.state.clients = owned_clients

    yield

    logger.info("application_shutdown")

    if owned_clients is not None:
        await owned_clients.aclose()
        logger.info("remote_clients_closed")
    if owned_engine is not None:
        await owned_engine.dispose()
        logger.info("database_engine_disposed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Operator API for tenant onboarding, slug allocation and reconciliation",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )
    app.state.settings = settings
    app.state.session_factory = None
    app.state.clients = None

    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    # Request logging runs inside the request ID middleware so its lines carry the ID
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Register exception handlers for RFC 7807 error responses
    register_exception_handlers(app)

    app.include_router(api_router)

    return app
