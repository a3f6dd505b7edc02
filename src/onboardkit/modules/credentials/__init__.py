"""Credentials module - owner password rotation and support probes."""

from fastapi import APIRouter


router = APIRouter(prefix="/credentials", tags=["credentials"])


# Module metadata
__module__ = {
    "name": "credentials",
    "version": "1.0.0",
    "description": "Temporary owner credentials and reversible mutation probes",
    "dependencies": ["tenants", "provisioning", "profiles"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from onboardkit.modules.credentials import routes  # noqa: F401
