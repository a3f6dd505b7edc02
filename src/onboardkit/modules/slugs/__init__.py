"""Slugs module - normalization, availability and allocation."""

from fastapi import APIRouter


router = APIRouter(prefix="/slugs", tags=["slugs"])


# Module metadata
__module__ = {
    "name": "slugs",
    "version": "1.0.0",
    "description": "Slug availability checks and allocation",
    "dependencies": ["tenants", "provisioning"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from onboardkit.modules.slugs import routes  # noqa: F401
