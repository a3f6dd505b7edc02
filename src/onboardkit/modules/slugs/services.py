"""Slug availability checking and allocation.

A slug can be claimed either by an onboarded tenant or by any provisioning
ledger record, including ones that stalled or failed. Both sources are
checked for every candidate.
"""

import asyncio
from collections.abc import Awaitable, Collection
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from onboardkit.core.constants import SLUG_SUFFIX_END, SLUG_SUFFIX_START
from onboardkit.core.errors import (
    AllocationExhaustedError,
    ServiceUnavailableError,
    ValidationError,
)
from onboardkit.core.utils import is_valid_slug, normalize_slug, suffixed_slug
from onboardkit.modules.provisioning.repos import ProvisioningRecordRepository
from onboardkit.modules.tenants.repos import TenantRepository


if TYPE_CHECKING:
    from onboardkit.core.context import ServiceContext


logger = structlog.get_logger()

TENANTS_SOURCE = "tenants"
LEDGER_SOURCE = "provisioning_ledger"


class AvailabilityReason(StrEnum):
    AVAILABLE = "available"
    TAKEN_BY_TENANT = "taken_by_tenant"
    CLAIMED_BY_PROVISIONING = "claimed_by_provisioning"
    CHECK_FAILED = "check_failed"


@dataclass
class SlugAvailability:
    """Answer for one candidate slug.

    ``conflicts`` lists the sources that hold the slug; ``failed_checks``
    lists the sources that could not be queried.
    """

    slug: str
    available: bool
    reason: AvailabilityReason
    conflicts: list[str] = field(default_factory=list)
    failed_checks: list[str] = field(default_factory=list)
    suggestion: str | None = None


class SlugAvailabilityChecker:
    """Read-only availability check against both slug sources.

    Fails closed: a sub-check that errors or times out makes the candidate
    unavailable.
    """

    def __init__(
        self,
        tenants: TenantRepository,
        ledger: ProvisioningRecordRepository,
        timeout: float = 5.0,
    ) -> None:
        self.tenants = tenants
        self.ledger = ledger
        self.timeout = timeout

    @classmethod
    def from_context(cls, ctx: "ServiceContext") -> "SlugAvailabilityChecker":
        return cls(
            TenantRepository(ctx.session),
            ProvisioningRecordRepository(ctx.session),
            timeout=ctx.settings.store_query_timeout_seconds,
        )

    async def _exists(self, source: str, slug: str, query: Awaitable[bool]) -> bool | None:
        """Run one existence query; ``None`` means the query failed."""
        try:
            return await asyncio.wait_for(query, timeout=self.timeout)
        except TimeoutError:
            logger.warning("slug_check_failed", check=source, slug=slug, error="timeout")
        except Exception as exc:
            logger.warning(
                "slug_check_failed",
                check=source,
                slug=slug,
                error=str(exc),
                error_type=type(exc).__name__,
            )
        return None

    async def check(self, slug: str) -> SlugAvailability:
        """Check a normalized candidate against the registry and the ledger.

        Raises:
            ValidationError: If ``slug`` is not a normalized candidate
        """
        if not is_valid_slug(slug):
            raise ValidationError(
                "Slug is malformed",
                errors=[{"field": "slug", "message": "Slug must be normalized"}],
            )

        in_tenants = await self._exists(
            TENANTS_SOURCE, slug, self.tenants.exists_by_slug(slug)
        )
        in_ledger = await self._exists(
            LEDGER_SOURCE, slug, self.ledger.exists_by_candidate_slug(slug)
        )

        conflicts = [
            source
            for source, found in ((TENANTS_SOURCE, in_tenants), (LEDGER_SOURCE, in_ledger))
            if found
        ]
        failed = [
            source
            for source, found in ((TENANTS_SOURCE, in_tenants), (LEDGER_SOURCE, in_ledger))
            if found is None
        ]

        if in_tenants:
            reason = AvailabilityReason.TAKEN_BY_TENANT
        elif in_ledger:
            reason = AvailabilityReason.CLAIMED_BY_PROVISIONING
        elif failed:
            reason = AvailabilityReason.CHECK_FAILED
        else:
            reason = AvailabilityReason.AVAILABLE

        return SlugAvailability(
            slug=slug,
            available=reason == AvailabilityReason.AVAILABLE,
            reason=reason,
            conflicts=conflicts,
            failed_checks=failed,
        )


class SlugAllocator:
    """Produces a slug that is free at check time.

    Linear probing over ``base``, ``base-2`` ... ``base-100``. Final
    uniqueness is enforced by the store, not by this check.
    """

    def __init__(self, checker: SlugAvailabilityChecker) -> None:
        self.checker = checker

    @staticmethod
    def candidates(base: str) -> list[str]:
        """Every candidate tried for ``base``, in probing order."""
        return [base] + [
            suffixed_slug(base, counter)
            for counter in range(SLUG_SUFFIX_START, SLUG_SUFFIX_END + 1)
        ]

    async def allocate(self, name: str, exclude: Collection[str] = ()) -> str:
        """Allocate a slug for a display name.

        Candidates in ``exclude`` are skipped without a lookup; they still
        count towards the probing bound.

        Raises:
            ValidationError: If ``name`` is blank
            ServiceUnavailableError: If the store could not be queried
            AllocationExhaustedError: If every candidate is taken
        """
        if not name or not name.strip():
            raise ValidationError(
                "Name must not be blank",
                errors=[{"field": "name", "message": "Name must not be blank"}],
            )

        base = normalize_slug(name)
        for candidate in self.candidates(base):
            if candidate in exclude:
                continue
            result = await self.checker.check(candidate)
            if result.available:
                logger.info("slug_allocated", base=base, slug=candidate)
                return candidate
            if result.reason == AvailabilityReason.CHECK_FAILED:
                raise ServiceUnavailableError(
                    details={"candidate": candidate, "failed_checks": result.failed_checks}
                )

        attempts = SLUG_SUFFIX_END - SLUG_SUFFIX_START + 1
        logger.warning("slug_allocation_exhausted", base=base, attempts=attempts)
        raise AllocationExhaustedError(base, attempts)


class SlugService:
    """Availability lookups with a suggested alternative."""

    def __init__(self, checker: SlugAvailabilityChecker, allocator: SlugAllocator) -> None:
        self.checker = checker
        self.allocator = allocator

    @classmethod
    def from_context(cls, ctx: "ServiceContext") -> "SlugService":
        checker = SlugAvailabilityChecker.from_context(ctx)
        return cls(checker, SlugAllocator(checker))

    async def availability(self, slug: str) -> SlugAvailability:
        """Check ``slug``; a taken slug carries a free suggestion when one exists."""
        result = await self.checker.check(slug)
        if result.available or result.reason == AvailabilityReason.CHECK_FAILED:
            return result

        try:
            result.suggestion = await self.allocator.allocate(slug)
        except (AllocationExhaustedError, ServiceUnavailableError):
            result.suggestion = None
        return result
