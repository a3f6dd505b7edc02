"""Shared utilities."""

from onboardkit.core.utils.text import is_valid_slug, normalize_slug, suffixed_slug


__all__ = ["is_valid_slug", "normalize_slug", "suffixed_slug"]
