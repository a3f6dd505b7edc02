"""Unit tests for the provisioning service client."""

import httpx
import pytest

from onboardkit.core.errors import ServiceUnavailableError
from onboardkit.modules.provisioning.client import ProvisioningServiceClient
from onboardkit.modules.provisioning.schemas import OutcomeStatus
from tests.fakes import error_response, success_response


def make_client(handler) -> ProvisioningServiceClient:
    return ProvisioningServiceClient(
        "http://provisioning.test",
        api_key="service-key",
        transport=httpx.MockTransport(handler),
    )


BODY = {"basics": {"name": "Joe's Cafe", "slug": "joes-cafe"}}


class TestCreateTenant:
    """Tests for ProvisioningServiceClient.create_tenant."""

    async def test_success(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return success_response("joes-cafe", tenant_id="t-1")

        async with make_client(handler) as client:
            outcome = await client.create_tenant(BODY, slug="joes-cafe")

        assert outcome.status == OutcomeStatus.SUCCEEDED
        assert outcome.tenant_id == "t-1"
        assert outcome.owner_id == "owner-1"
        assert outcome.primary_url == "https://joes-cafe.example.com"
        assert seen[0].url.path == "/tenant-provisioning"
        assert seen[0].headers["apikey"] == "service-key"
        assert seen[0].headers["Authorization"] == "Bearer service-key"

    @pytest.mark.parametrize("code", ["SLUG_UNAVAILABLE", "SLUG_TAKEN", "DUPLICATE_SLUG"])
    async def test_slug_conflict_codes(self, code):
        async with make_client(lambda r: error_response(400, code, "Slug taken")) as client:
            outcome = await client.create_tenant(BODY, slug="joes-cafe")

        assert outcome.status == OutcomeStatus.SLUG_TAKEN
        assert outcome.slug == "joes-cafe"
        assert outcome.error_code == code

    async def test_bare_409_is_slug_conflict(self):
        async with make_client(lambda r: error_response(409, None, "Conflict")) as client:
            outcome = await client.create_tenant(BODY, slug="joes-cafe")

        assert outcome.status == OutcomeStatus.SLUG_TAKEN

    async def test_structured_rejection_is_verbatim(self):
        def handler(request):
            return error_response(
                422, "OWNER_EXISTS", "Owner email already registered", hint="Pick another"
            )

        async with make_client(handler) as client:
            outcome = await client.create_tenant(BODY, slug="joes-cafe")

        assert outcome.status == OutcomeStatus.REJECTED
        assert outcome.error_code == "OWNER_EXISTS"
        assert outcome.message == "Owner email already registered"
        assert outcome.hint == "Pick another"
        assert outcome.remote_status == 422

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(502, text="<html>Bad Gateway</html>"),
            httpx.Response(200, json={"success": True}),
            httpx.Response(200, json=["unexpected"]),
            httpx.Response(500, json={"success": False, "error": "boom"}),
        ],
    )
    async def test_unrecognized_response_is_unavailable(self, response):
        async with make_client(lambda r: response) as client:
            outcome = await client.create_tenant(BODY, slug="joes-cafe")

        assert outcome.status == OutcomeStatus.UNAVAILABLE
        assert outcome.succeeded is False

    async def test_transport_failure_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        async with make_client(handler) as client:
            with pytest.raises(ServiceUnavailableError) as exc_info:
                await client.create_tenant(BODY, slug="joes-cafe")

        assert exc_info.value.details == {"service": "provisioning", "reason": "transport_error"}

    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out")

        async with make_client(handler) as client:
            with pytest.raises(ServiceUnavailableError) as exc_info:
                await client.create_tenant(BODY, slug="joes-cafe")

        assert exc_info.value.details["reason"] == "timeout"
