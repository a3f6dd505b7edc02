"""Unit tests for slug availability checking and allocation."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from structlog.testing import capture_logs

from onboardkit.core.errors import (
    AllocationExhaustedError,
    ServiceUnavailableError,
    ValidationError,
)
from onboardkit.modules.slugs.services import (
    AvailabilityReason,
    SlugAllocator,
    SlugAvailabilityChecker,
    SlugService,
)


def make_checker(
    taken_tenants: set[str] | None = None,
    claimed: set[str] | None = None,
    timeout: float = 1.0,
) -> SlugAvailabilityChecker:
    """Build a checker over in-memory slug sets."""
    taken_tenants = taken_tenants or set()
    claimed = claimed or set()

    tenants = AsyncMock()
    tenants.exists_by_slug.side_effect = lambda slug: slug in taken_tenants
    ledger = AsyncMock()
    ledger.exists_by_candidate_slug.side_effect = lambda slug: slug in claimed
    return SlugAvailabilityChecker(tenants, ledger, timeout=timeout)


class TestSlugAvailabilityChecker:
    """Tests for SlugAvailabilityChecker.check."""

    async def test_free_slug_is_available(self):
        result = await make_checker().check("joes-cafe")

        assert result.available is True
        assert result.reason == AvailabilityReason.AVAILABLE
        assert result.conflicts == []

    async def test_tenant_conflict(self):
        result = await make_checker(taken_tenants={"joes-cafe"}).check("joes-cafe")

        assert result.available is False
        assert result.reason == AvailabilityReason.TAKEN_BY_TENANT
        assert result.conflicts == ["tenants"]

    async def test_ledger_claim_makes_slug_unavailable(self):
        result = await make_checker(claimed={"joes-cafe"}).check("joes-cafe")

        assert result.available is False
        assert result.reason == AvailabilityReason.CLAIMED_BY_PROVISIONING
        assert result.conflicts == ["provisioning_ledger"]

    async def test_both_sources_reported(self):
        checker = make_checker(taken_tenants={"joes-cafe"}, claimed={"joes-cafe"})
        result = await checker.check("joes-cafe")

        assert result.reason == AvailabilityReason.TAKEN_BY_TENANT
        assert result.conflicts == ["tenants", "provisioning_ledger"]

    async def test_failed_query_fails_closed(self):
        checker = make_checker()
        checker.ledger.exists_by_candidate_slug.side_effect = ConnectionError("store down")

        with capture_logs() as logs:
            result = await checker.check("joes-cafe")

        assert result.available is False
        assert result.reason == AvailabilityReason.CHECK_FAILED
        assert result.failed_checks == ["provisioning_ledger"]
        failures = [log for log in logs if log["event"] == "slug_check_failed"]
        assert failures[0]["check"] == "provisioning_ledger"
        assert failures[0]["slug"] == "joes-cafe"

    async def test_timed_out_query_fails_closed(self):
        async def slow(slug):
            await asyncio.sleep(1)
            return False

        checker = make_checker(timeout=0.01)
        checker.tenants.exists_by_slug.side_effect = slow

        result = await checker.check("joes-cafe")

        assert result.available is False
        assert result.reason == AvailabilityReason.CHECK_FAILED
        assert result.failed_checks == ["tenants"]

    async def test_known_conflict_wins_over_failed_check(self):
        checker = make_checker(claimed={"joes-cafe"})
        checker.tenants.exists_by_slug.side_effect = ConnectionError("store down")

        result = await checker.check("joes-cafe")

        assert result.reason == AvailabilityReason.CLAIMED_BY_PROVISIONING
        assert result.failed_checks == ["tenants"]

    @pytest.mark.parametrize("slug", ["Joes-Cafe", "ab", "joes--cafe", ""])
    async def test_malformed_slug_rejected(self, slug):
        with pytest.raises(ValidationError):
            await make_checker().check(slug)


class TestSlugAllocator:
    """Tests for SlugAllocator.allocate."""

    async def test_returns_base_when_free(self):
        allocator = SlugAllocator(make_checker())

        assert await allocator.allocate("Joe's Café") == "joes-cafe"

    async def test_probes_suffixes_in_order(self):
        checker = make_checker(taken_tenants={"joes-cafe"}, claimed={"joes-cafe-2"})
        allocator = SlugAllocator(checker)

        assert await allocator.allocate("Joe's Cafe") == "joes-cafe-3"
        checked = [call.args[0] for call in checker.tenants.exists_by_slug.call_args_list]
        assert checked == ["joes-cafe", "joes-cafe-2", "joes-cafe-3"]

    async def test_exhaustion(self):
        taken = set(SlugAllocator.candidates("busy"))
        allocator = SlugAllocator(make_checker(claimed=taken))

        with pytest.raises(AllocationExhaustedError) as exc_info:
            await allocator.allocate("Busy")

        assert exc_info.value.base == "busy"
        assert exc_info.value.attempts == 99
        checked = [call.args[0] for call in allocator.checker.tenants.exists_by_slug.call_args_list]
        assert len(checked) == 100
        assert checked[0] == "busy"
        assert checked[1] == "busy-2"
        assert checked[-1] == "busy-100"

    async def test_last_suffix_is_tried(self):
        taken = set(SlugAllocator.candidates("busy")[:-1])
        allocator = SlugAllocator(make_checker(claimed=taken))

        assert await allocator.allocate("Busy") == "busy-100"

    async def test_excluded_candidates_are_skipped(self):
        checker = make_checker()
        allocator = SlugAllocator(checker)

        assert await allocator.allocate("Joe's Cafe", exclude={"joes-cafe"}) == "joes-cafe-2"
        checked = [call.args[0] for call in checker.tenants.exists_by_slug.call_args_list]
        assert checked == ["joes-cafe-2"]

    @pytest.mark.parametrize("name", ["", "   "])
    async def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError):
            await SlugAllocator(make_checker()).allocate(name)

    async def test_failed_check_aborts_allocation(self):
        checker = make_checker()
        checker.tenants.exists_by_slug.side_effect = ConnectionError("store down")

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await SlugAllocator(checker).allocate("Joe's Cafe")

        assert exc_info.value.details["candidate"] == "joes-cafe"
        assert exc_info.value.details["failed_checks"] == ["tenants"]

    def test_candidates_stay_within_cap(self):
        candidates = SlugAllocator.candidates("x" * 50)

        assert len(candidates) == 100
        assert all(len(candidate) <= 50 for candidate in candidates)
        assert len(set(candidates)) == 100


class TestSlugService:
    """Tests for SlugService.availability."""

    async def test_taken_slug_gets_suggestion(self):
        checker = make_checker(taken_tenants={"joes-cafe"})
        service = SlugService(checker, SlugAllocator(checker))

        result = await service.availability("joes-cafe")

        assert result.available is False
        assert result.suggestion == "joes-cafe-2"

    async def test_free_slug_has_no_suggestion(self):
        checker = make_checker()
        service = SlugService(checker, SlugAllocator(checker))

        result = await service.availability("joes-cafe")

        assert result.available is True
        assert result.suggestion is None

    async def test_exhausted_suggestion_is_none(self):
        checker = make_checker(claimed=set(SlugAllocator.candidates("busy")))
        service = SlugService(checker, SlugAllocator(checker))

        result = await service.availability("busy")

        assert result.available is False
        assert result.suggestion is None
