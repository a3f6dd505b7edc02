"""Identity service access and credential utilities."""

from onboardkit.core.auth.backend import generate_temporary_password
from onboardkit.core.auth.client import IdentityServiceClient
from onboardkit.core.auth.schemas import IdentityUser, RecoveryLink


__all__ = [
    "IdentityServiceClient",
    "IdentityUser",
    "RecoveryLink",
    "generate_temporary_password",
]
