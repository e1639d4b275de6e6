"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
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
from infrastructure.database.models import Base, LocationModel, ProductModel, ProfileModel

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()

# Last restricted-field change of the seeded profile
SEEDED_BASIC_INFO_AT = datetime.utcnow() - timedelta(days=90)


class BasicInfoGate:
    """Stands in for the ``can_update_basic_info`` database function."""

    def __init__(self) -> None:
        self.allowed = True
        self.calls: list[Any] = []

    def __call__(self, profile_id: Any) -> int:
        self.calls.append(profile_id)
        return 1 if self.allowed else 0


@pytest.fixture
def basic_info_gate() -> BasicInfoGate:
    return BasicInfoGate()


@pytest.fixture
async def engine(
    tmp_path: Path, basic_info_gate: BasicInfoGate
) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with the eligibility function registered."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _register_functions(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.create_function("can_update_basic_info", 1, basic_info_gate)

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
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="ana@example.com",
        display_name="Ana Souza",
    )


@pytest.fixture
async def seeded_profile(
    session_factory: async_sessionmaker[AsyncSession], test_user: TokenUser
) -> UUID:
    """Profile, two products and three locations for the test user."""
    async with session_factory() as session:
        session.add(
            ProfileModel(
                id=test_user.id,
                full_name="Ana Souza",
                email=test_user.email,
                phone="+351900000000",
                birth_date=date(1990, 5, 17),
                city="Porto",
                username="ana",
                avatar_url="https://www.dropbox.com/s/abc123/ana.jpg?dl=0",
                basic_info_updated_at=SEEDED_BASIC_INFO_AT,
            )
        )
        session.add_all(
            [
                ProductModel(user_id=test_user.id, title="Bicycle", price=Decimal("120.00")),
                ProductModel(user_id=test_user.id, title="Guitar", price=Decimal("300.00")),
                ProductModel(user_id=uuid4(), title="Someone else's lamp"),
                LocationModel(name="Porto", state="Porto"),
                LocationModel(name="Braga", state="Braga"),
                LocationModel(name="Lisboa", state="Lisboa"),
            ]
        )
        await session.commit()
    return test_user.id


@pytest.fixture
def seeded_basic_info_at() -> datetime:
    """When the seeded profile last changed its username or phone."""
    return SEEDED_BASIC_INFO_AT


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing (no backend logout endpoint)."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
        logout_url="",
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
    """Create async test client (no auth, no database)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _build_test_app(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
) -> Any:
    """App wired to the test database with fresh cache and view state."""
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import get_profile_service, get_profile_view_service
    from domain.services.profile_service import ProfileService
    from domain.services.profile_view_service import ProfileViewService
    from domain.services.query_cache import QueryCache
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    profile_service = ProfileService(
        lambda: SQLAlchemyUnitOfWork(session_factory),
        cache=QueryCache(stale_seconds=60),
    )
    view_service = ProfileViewService(placeholder_url="/placeholder.svg")

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_profile_service] = lambda: profile_service
    app.dependency_overrides[get_profile_view_service] = lambda: view_service
    return app


@pytest.fixture
async def anonymous_client(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
    seeded_profile: UUID,
) -> AsyncGenerator[AsyncClient, None]:
    """Client with a seeded database but no session."""
    app = _build_test_app(session_factory, auth_provider)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
    auth_headers: dict[str, str],
    seeded_profile: UUID,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create authenticated test client with proper database and auth overrides.

    This client:
    - Uses a per-test SQLite database seeded with the test user's profile
    - Sends a real HS256 bearer token validated by the test auth provider
    - Gets its own query cache and view state
    """
    app = _build_test_app(session_factory, auth_provider)

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c

    app.dependency_overrides.clear()
