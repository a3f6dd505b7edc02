"""Provisioning module - tenant onboarding and the provisioning ledger."""

from fastapi import APIRouter


router = APIRouter(prefix="/provisioning", tags=["provisioning"])


# Module metadata
__module__ = {
    "name": "provisioning",
    "version": "1.0.0",
    "description": "Tenant onboarding through the remote provisioning service",
    "dependencies": ["tenants", "slugs"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from onboardkit.modules.provisioning import routes  # noqa: F401
