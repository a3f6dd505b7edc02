"""Unit tests for onboarding payload and outcome schemas."""

import pytest

from onboardkit.core.errors import (
    RemoteServiceError,
    ServiceUnavailableError,
    SlugUnavailableError,
    ValidationError,
)
from onboardkit.modules.provisioning.schemas import (
    OnboardingPayload,
    OutcomeStatus,
    ProvisioningOutcome,
)


def payload_data(**basics) -> dict:
    return {
        "basics": {"name": "Joe's Cafe", "slug": "joes-cafe", **basics},
        "owner": {"email": "Owner@Example.com", "name": "Joe"},
    }


class TestOnboardingPayload:
    """Tests for OnboardingPayload."""

    def test_parse_accepts_camel_case(self):
        payload = OnboardingPayload.parse(
            {
                **payload_data(),
                "seed": {"seatingPreset": "compact", "enablePacing": True},
                "billing": {"createSubscription": True, "plan": "pro"},
                "idempotencyKey": "key-1",
            }
        )

        assert payload.seed.seating_preset == "compact"
        assert payload.seed.enable_pacing is True
        assert payload.billing.create_subscription is True
        assert payload.idempotency_key == "key-1"

    def test_defaults(self):
        payload = OnboardingPayload.parse(payload_data())

        assert payload.kind == "tenant_onboarding"
        assert payload.access.mode == "standard"
        assert payload.owner.email == "owner@example.com"
        assert payload.owner.send_invite is True
        assert payload.idempotency_key

    def test_each_payload_gets_its_own_idempotency_key(self):
        first = OnboardingPayload.parse(payload_data())
        second = OnboardingPayload.parse(payload_data())

        assert first.idempotency_key != second.idempotency_key

    def test_malformed_slug_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            OnboardingPayload.parse(payload_data(slug="Joes Cafe"))

        fields = [error["field"] for error in exc_info.value.details["errors"]]
        assert fields == ["basics.slug"]

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            OnboardingPayload.parse(payload_data(name="   "))

        fields = [error["field"] for error in exc_info.value.details["errors"]]
        assert "basics.name" in fields

    def test_missing_owner_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            OnboardingPayload.parse({"basics": {"name": "Joe's Cafe"}})

        fields = [error["field"] for error in exc_info.value.details["errors"]]
        assert "owner" in fields

    def test_invalid_owner_email_rejected(self):
        data = payload_data()
        data["owner"]["email"] = "not-an-email"

        with pytest.raises(ValidationError):
            OnboardingPayload.parse(data)

    def test_wrong_kind_rejected(self):
        with pytest.raises(ValidationError):
            OnboardingPayload.parse({**payload_data(), "kind": "something_else"})

    def test_to_wire_uses_camel_case(self):
        payload = OnboardingPayload.parse(payload_data(currency="eur"))
        wire = payload.to_wire()

        assert "kind" not in wire
        assert wire["basics"]["slug"] == "joes-cafe"
        assert wire["basics"]["currency"] == "EUR"
        assert wire["owner"]["sendInvite"] is True
        assert wire["seed"]["seatingPreset"] == "standard"
        assert wire["sms"]["startRegistration"] is False
        assert wire["idempotencyKey"] == payload.idempotency_key

    def test_with_slug_returns_copy(self):
        payload = OnboardingPayload.parse(payload_data(slug=None))
        updated = payload.with_slug("joes-cafe-2")

        assert updated.basics.slug == "joes-cafe-2"
        assert payload.basics.slug is None
        assert updated.idempotency_key == payload.idempotency_key


class TestProvisioningOutcome:
    """Tests for ProvisioningOutcome.to_exception."""

    def test_success_has_no_exception(self):
        outcome = ProvisioningOutcome(status=OutcomeStatus.SUCCEEDED, slug="joes-cafe")

        assert outcome.succeeded is True
        assert outcome.to_exception() is None

    def test_slug_taken(self):
        outcome = ProvisioningOutcome(status=OutcomeStatus.SLUG_TAKEN, slug="joes-cafe")
        exc = outcome.to_exception()

        assert isinstance(exc, SlugUnavailableError)
        assert exc.details["slug"] == "joes-cafe"

    def test_unavailable(self):
        outcome = ProvisioningOutcome(status=OutcomeStatus.UNAVAILABLE, slug="joes-cafe")

        assert isinstance(outcome.to_exception(), ServiceUnavailableError)

    @pytest.mark.parametrize(
        ("remote_status", "expected"),
        [(400, 422), (422, 422), (409, 409), (500, 502), (None, 502)],
    )
    def test_rejection_passes_remote_error_through(self, remote_status, expected):
        outcome = ProvisioningOutcome(
            status=OutcomeStatus.REJECTED,
            slug="joes-cafe",
            message="Owner email already registered",
            error_code="OWNER_EXISTS",
            hint="Use a different owner email",
            remote_status=remote_status,
        )
        exc = outcome.to_exception()

        assert isinstance(exc, RemoteServiceError)
        assert exc.status_code == expected
        assert exc.error_code == "OWNER_EXISTS"
        assert exc.message == "Owner email already registered"
        assert exc.details["hint"] == "Use a different owner email"
