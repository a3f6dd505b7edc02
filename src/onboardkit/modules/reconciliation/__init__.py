"""Reconciliation module - read-only integrity reporting."""

from fastapi import APIRouter


router = APIRouter(prefix="/reconciliation", tags=["reconciliation"])


# Module metadata
__module__ = {
    "name": "reconciliation",
    "version": "1.0.0",
    "description": "Orphaned tenant and broken identity link detection",
    "dependencies": ["tenants", "provisioning", "profiles"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from onboardkit.modules.reconciliation import routes  # noqa: F401
