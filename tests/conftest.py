"""Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite store and in-process fakes of the
remote services served through ``httpx.MockTransport``.
"""

from collections.abc import AsyncGenerator

import pytest
import structlog
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from onboardkit.config import Settings
from onboardkit.core.auth import IdentityServiceClient
from onboardkit.core.context import RemoteClients, ServiceContext
from onboardkit.core.database import Base, build_session_factory
from onboardkit.main import create_app
from onboardkit.modules.credentials.notifier import NotificationClient

# Import all models to ensure they're registered with Base.metadata
from onboardkit.core.audit.models import SecurityEvent  # noqa: F401
from onboardkit.modules.profiles.models import Profile
from onboardkit.modules.provisioning.client import ProvisioningServiceClient
from onboardkit.modules.provisioning.models import ProvisioningRecord  # noqa: F401
from onboardkit.modules.tenants.models import Tenant  # noqa: F401
from tests.factories import ProfileFactory
from tests.fakes import (
    OPERATOR_ID,
    OPERATOR_TOKEN,
    FakeIdentityService,
    FakeNotificationChannel,
    FakeProvisioningService,
)


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by the app factory or a CLI command."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the in-process fakes."""
    return Settings(
        environment="test",
        provisioning_service_url="http://provisioning.test",
        identity_service_url="http://identity.test",
        notification_service_url="http://notification.test",
        placeholder_tenant_emails=["admin@example.com"],
        report_recent_limit=10,
        stale_pending_minutes=60,
        provisioning_slug_retries=3,
        store_query_timeout_seconds=2.0,
    )


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


# ============================================================
# Remote Service Fakes
# ============================================================


@pytest.fixture
def identity_service() -> FakeIdentityService:
    return FakeIdentityService()


@pytest.fixture
def provisioning_service() -> FakeProvisioningService:
    return FakeProvisioningService()


@pytest.fixture
def notification_channel() -> FakeNotificationChannel:
    return FakeNotificationChannel()


@pytest.fixture
async def clients(
    settings: Settings,
    identity_service: FakeIdentityService,
    provisioning_service: FakeProvisioningService,
    notification_channel: FakeNotificationChannel,
) -> AsyncGenerator[RemoteClients, None]:
    """Remote clients wired to the fakes."""
    remote = RemoteClients(
        provisioning=ProvisioningServiceClient(
            settings.provisioning_service_url,
            api_key="provisioning-key",
            transport=provisioning_service.transport(),
        ),
        identity=IdentityServiceClient(
            settings.identity_service_url,
            api_key="identity-key",
            transport=identity_service.transport(),
        ),
        notifier=NotificationClient(
            settings.notification_service_url,
            api_key="notification-key",
            transport=notification_channel.transport(),
        ),
    )
    yield remote
    await remote.aclose()


@pytest.fixture
def ctx(settings: Settings, db: AsyncSession, clients: RemoteClients) -> ServiceContext:
    """Service context over the test store and the fakes."""
    return ServiceContext.build(settings, db, clients)


# ============================================================
# HTTP Surface
# ============================================================


@pytest.fixture
def app(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    clients: RemoteClients,
):
    """Create test application instance wired to the test store and fakes."""
    application = create_app(settings)
    application.state.session_factory = session_factory
    application.state.clients = clients
    return application


@pytest.fixture
async def operator(db: AsyncSession, identity_service: FakeIdentityService) -> Profile:
    """An operator identity with a valid session token."""
    identity_service.add_user(OPERATOR_ID, "ops@example.com")
    identity_service.sessions[OPERATOR_TOKEN] = OPERATOR_ID

    profile = ProfileFactory.build(user_id=OPERATOR_ID, email="ops@example.com", role="ADMIN")
    db.add(profile)
    await db.commit()
    return profile


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide an unauthenticated async HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def operator_client(app, operator: Profile) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client authenticated as an operator."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {OPERATOR_TOKEN}"},
    ) as client:
        yield client
