"""Slug API routes."""

from dataclasses import asdict

from fastapi import status

from onboardkit.api.dependencies import Context
from onboardkit.core.auth.dependencies import Operator
from onboardkit.modules.slugs import router
from onboardkit.modules.slugs.schemas import (
    SlugAllocationRequest,
    SlugAllocationResponse,
    SlugAvailabilityResponse,
)
from onboardkit.modules.slugs.services import SlugService


@router.get(
    "/{slug}/availability",
    response_model=SlugAvailabilityResponse,
    summary="Check slug availability",
    description="Checks the tenant registry and the provisioning ledger. "
    "A store failure answers unavailable with reason check_failed.",
)
async def check_availability(
    slug: str,
    ctx: Context,
    _operator: Operator,
) -> SlugAvailabilityResponse:
    """Check whether a normalized slug is free."""
    result = await SlugService.from_context(ctx).availability(slug)
    return SlugAvailabilityResponse(**asdict(result))


@router.post(
    "/allocations",
    response_model=SlugAllocationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Allocate a slug",
    description="Normalizes the name and probes suffixed candidates until one is free.",
)
async def allocate_slug(
    data: SlugAllocationRequest,
    ctx: Context,
    _operator: Operator,
) -> SlugAllocationResponse:
    """Allocate a slug for a display name."""
    slug = await SlugService.from_context(ctx).allocator.allocate(data.name)
    return SlugAllocationResponse(name=data.name, slug=slug)
