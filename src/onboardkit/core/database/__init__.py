"""Database layer - session management, base models, and mixins."""

from onboardkit.core.database.base import Base, TimestampMixin, UUIDMixin
from onboardkit.core.database.session import (
    build_engine,
    build_session_factory,
    get_db,
)


__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "build_engine",
    "build_session_factory",
    "get_db",
]
