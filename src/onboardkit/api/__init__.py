"""API layer - root router and shared dependencies."""

from onboardkit.api.router import api_router


__all__ = ["api_router"]
