"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, ProfileModel
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine so that separate sessions really contend."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def make_profile(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Any]:
    """Insert a profile row and return its ID."""

    async def _make_profile(
        email: str | None = None,
        handle: str | None = None,
        created_at: datetime | None = None,
        id: UUID | None = None,
        **fields: Any,
    ) -> UUID:
        profile = ProfileModel(
            id=id or uuid4(),
            email=email or f"{uuid4().hex[:12]}@example.com",
            handle=handle,
            created_at=created_at or datetime.utcnow(),
            **fields,
        )
        async with session_factory() as session:
            session.add(profile)
            await session.commit()
        return profile.id

    return _make_profile


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="Test User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no database, no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def app_client(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    auth_provider: JWTAuthProvider,
    test_user: TokenUser,
    make_profile: Callable[..., Any],
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create test client with database and auth overrides.

    This client:
    - Uses a per-test SQLite database
    - Inserts a profile for the test user (no handle yet)
    - Verifies bearer tokens with the test auth provider
    - Builds the handle services on the test Unit of Work factory
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        get_availability_service,
        get_handle_service,
        get_search_service,
    )
    from domain.services.availability_service import AvailabilityService
    from domain.services.handle_service import HandleService
    from domain.services.reserved_registry import ReservedRegistry
    from domain.services.search_service import SearchService
    from main import create_app

    app = create_app()

    await make_profile(
        id=test_user.id,
        email=test_user.email,
        first_name="Test",
        last_name="User",
        display_name=test_user.display_name,
    )

    availability = AvailabilityService(uow_factory, ReservedRegistry.default())
    handle_service = HandleService(uow_factory, availability_service=availability)
    search_service = SearchService(uow_factory)

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_availability_service] = lambda: availability
    app.dependency_overrides[get_handle_service] = lambda: handle_service
    app.dependency_overrides[get_search_service] = lambda: search_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
