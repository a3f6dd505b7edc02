"""Test factories for generating model instances."""

from tests.factories.profile import ProfileFactory
from tests.factories.provisioning import ProvisioningRecordFactory
from tests.factories.tenant import TenantFactory


__all__ = ["ProfileFactory", "ProvisioningRecordFactory", "TenantFactory"]
