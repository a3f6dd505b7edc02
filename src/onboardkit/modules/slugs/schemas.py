"""Pydantic schemas for slug operations."""

from pydantic import BaseModel, Field

from onboardkit.core.constants import MAX_NAME_LENGTH


class SlugAvailabilityResponse(BaseModel):
    """Availability answer for one candidate."""

    slug: str
    available: bool
    reason: str
    conflicts: list[str] = []
    failed_checks: list[str] = []
    suggestion: str | None = None


class SlugAllocationRequest(BaseModel):
    """Request to allocate a slug for a display name."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)


class SlugAllocationResponse(BaseModel):
    name: str
    slug: str
