"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from onboardkit.core.context import ServiceContext
from onboardkit.core.database import get_db


# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


async def get_service_context(request: Request, db: DBSession) -> ServiceContext:
    """Build the per-request context from the objects created at startup."""
    return ServiceContext.build(request.app.state.settings, db, request.app.state.clients)


Context = Annotated[ServiceContext, Depends(get_service_context)]
