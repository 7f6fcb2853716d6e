"""
Pytest configuration and fixtures for testing.

Provides:
- Database fixtures (in-memory SQLite through aiosqlite, one database per test)
- An app instance with the session dependency overridden and fake device clients
- An httpx AsyncClient bound to the app
- Users and bearer headers

Usage:
    pytest -v
"""

import os

# Settings are read at import time; configure before importing app modules
os.environ.setdefault("SECURITY_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("SECURITY_BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("MONITORING_ENABLE_METRICS", "false")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("MQTT_ENABLED", "false")
os.environ.setdefault("LOG_ENABLE_FILE_LOGGING", "false")
os.environ.setdefault("GOOGLE_CLIENT_IDS", "test-web-client-id,test-android-client-id")
os.environ.setdefault("FRONTEND_BASE_URL", "http://testserver")

from typing import AsyncGenerator, Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import db.models  # noqa: E402,F401
from api.services.auth_service import AuthenticationService  # noqa: E402
from api.services.email_service import EmailService  # noqa: E402
from api.services.google_auth import GoogleTokenVerifier  # noqa: E402
from api.services.mqtt_bridge import MQTTBridge  # noqa: E402
from api.services.pump_controller import PumpController  # noqa: E402
from core.config import settings  # noqa: E402
from core.database import get_session  # noqa: E402
from core.security import create_access_token  # noqa: E402
from db import User  # noqa: E402
from tests.fakes import FakePlug, FakePublisher  # noqa: E402
from tests.factories import DEFAULT_PASSWORD, UserFactory  # noqa: E402


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite engine shared by the test and the app under test.

    StaticPool keeps a single connection so every session sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and inspecting data directly."""
    async with session_maker() as session:
        yield session


# ============================================================================
# Device Fakes
# ============================================================================

@pytest.fixture
def fake_plug() -> FakePlug:
    return FakePlug()


@pytest.fixture
def fake_publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def pump_controller(fake_plug, fake_publisher) -> PumpController:
    return PumpController(fake_plug, publisher=fake_publisher, status_topic=settings.mqtt.pump_status_topic)


# ============================================================================
# External Service Mocks
# ============================================================================

@pytest.fixture
def mock_email_service():
    """EmailService double that records sends instead of talking to SMTP."""
    service = MagicMock(spec=EmailService)
    service.send_verification_email = AsyncMock(return_value=None)
    service.send_password_reset_email = AsyncMock(return_value=None)
    return service


@pytest.fixture
def mock_google_verifier():
    verifier = MagicMock(spec=GoogleTokenVerifier)
    verifier.verify = AsyncMock()
    return verifier


@pytest.fixture
def auth_service(mock_email_service, mock_google_verifier) -> AuthenticationService:
    return AuthenticationService(
        email_service=mock_email_service,
        google_verifier=mock_google_verifier,
    )


# ============================================================================
# Application Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def app(session_maker, auth_service, pump_controller, fake_publisher):
    """Application with the database and device clients replaced.

    ASGITransport does not run the lifespan, so app.state is populated here.
    """
    from app import create_app

    application = create_app()

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_session] = override_get_session
    application.state.auth_service = auth_service
    application.state.pump_controller = pump_controller
    application.state.mqtt_bridge = MQTTBridge(settings.mqtt)

    yield application

    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ============================================================================
# User Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def verified_user(db_session: AsyncSession) -> User:
    """Active, verified user whose password is DEFAULT_PASSWORD."""
    user = UserFactory.create(email="operator@vegobolt.com", first_name="Maria", last_name="Santos")
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def unverified_user(db_session: AsyncSession) -> User:
    user = UserFactory.create(email="pending@vegobolt.com", is_email_verified=False)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    user = UserFactory.create(email="admin@vegobolt.com", first_name="Admin", last_name="User", is_admin=True)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(verified_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(verified_user)}"}


@pytest.fixture
def admin_headers(admin_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(admin_user)}"}


@pytest.fixture
def password() -> str:
    return DEFAULT_PASSWORD
