"""Shared fixtures: in-memory database, HTTP clients and logged-in users."""
import os

# Must be set before application modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_BACKEND"] = "database"
os.environ["REDIS_ENABLED"] = "false"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from api.main import app  # noqa: E402
from db.session import get_async_session  # noqa: E402
from models import Base  # noqa: E402

TEST_PASSWORD = "correct horse battery staple"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory SQLite database per test, shared by every connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def client_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], AsyncClient]:
    """
    Build HTTP clients wired to the test database.

    Each client keeps its own cookie jar, so two clients act as two browsers.
    """

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_async_session] = override_get_async_session

    def make_client() -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")

    yield make_client
    app.dependency_overrides.clear()


@pytest.fixture
async def client(client_factory: Callable[[], AsyncClient]) -> AsyncGenerator[AsyncClient]:
    """Anonymous HTTP client."""
    async with client_factory() as client:
        yield client


@pytest.fixture
def register() -> Callable[..., Awaitable[None]]:
    """Register (and thereby log in) a user on the given client."""

    async def _register(
        client: AsyncClient,
        email: str,
        name: str = "Test User",
        password: str = TEST_PASSWORD,
    ) -> None:
        response = await client.post(
            "/register", json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 303, response.text

    return _register


@pytest.fixture
async def user_client(
    client_factory: Callable[[], AsyncClient],
    register: Callable[..., Awaitable[None]],
) -> AsyncGenerator[AsyncClient]:
    """HTTP client logged in as alice@example.com."""
    async with client_factory() as client:
        await register(client, "alice@example.com", name="Alice")
        yield client


@pytest.fixture
async def other_client(
    client_factory: Callable[[], AsyncClient],
    register: Callable[..., Awaitable[None]],
) -> AsyncGenerator[AsyncClient]:
    """HTTP client logged in as bob@example.com."""
    async with client_factory() as client:
        await register(client, "bob@example.com", name="Bob")
        yield client
