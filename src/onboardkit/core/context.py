"""Explicit service context.

Every operation receives its collaborators through a ``ServiceContext``
instead of reaching for module-level clients or sessions. The API builds one
per request from objects created in the app lifespan; scripts and the CLI
use ``open_context``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from onboardkit.config import Settings
from onboardkit.core.auth.client import IdentityServiceClient
from onboardkit.core.database import build_engine, build_session_factory
from onboardkit.modules.credentials.notifier import NotificationClient
from onboardkit.modules.provisioning.client import ProvisioningServiceClient


@dataclass
class RemoteClients:
    """The three remote collaborators, sharing one lifetime."""

    provisioning: ProvisioningServiceClient
    identity: IdentityServiceClient
    notifier: NotificationClient

    @classmethod
    def from_settings(cls, settings: Settings) -> "RemoteClients":
        """Build every client from its configured URL, key and timeout."""
        timeout = settings.http_timeout_seconds
        return cls(
            provisioning=ProvisioningServiceClient(
                settings.provisioning_service_url,
                api_key=settings.provisioning_service_key,
                timeout=timeout,
            ),
            identity=IdentityServiceClient(
                settings.identity_service_url,
                api_key=settings.identity_service_key,
                timeout=timeout,
            ),
            notifier=NotificationClient(
                settings.notification_service_url,
                api_key=settings.notification_service_key,
                timeout=timeout,
            ),
        )

    async def aclose(self) -> None:
        await self.provisioning.aclose()
        await self.identity.aclose()
        await self.notifier.aclose()


@dataclass
class ServiceContext:
    """Collaborators for one unit of work."""

    settings: Settings
    session: AsyncSession
    provisioning: ProvisioningServiceClient
    identity: IdentityServiceClient
    notifier: NotificationClient

    @classmethod
    def build(
        cls, settings: Settings, session: AsyncSession, clients: RemoteClients
    ) -> "ServiceContext":
        return cls(
            settings=settings,
            session=session,
            provisioning=clients.provisioning,
            identity=clients.identity,
            notifier=clients.notifier,
        )


@asynccontextmanager
async def open_context(settings: Settings) -> AsyncIterator[ServiceContext]:
    """Open a standalone context with its own engine and clients.

    The session is committed when the block exits cleanly and rolled back
    otherwise; the engine and clients are always released.
    """
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    clients = RemoteClients.from_settings(settings)
    try:
        async with session_factory() as session:
            try:
                yield ServiceContext.build(settings, session, clients)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    finally:
        await clients.aclose()
        await engine.dispose()
