"""
Test infrastructure for the Mingle API.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- Each test gets its own engine with freshly created tables, handed to
  ``create_app`` so every request runs against it.
- bcrypt runs with the minimum cost factor so registrations stay cheap.
"""
import itertools

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from mingle.config import Settings
from mingle.database import Base, build_session_factory
from mingle.main import create_app
from mingle.middleware import install_query_counter
from mingle.security import PasswordHasher, TokenCodec

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET = "test-secret-key"

test_settings = Settings(
    _env_file=None,
    DATABASE_URL=TEST_DATABASE_URL,
    JWT_SECRET=TEST_SECRET,
    BCRYPT_ROUNDS=4,
    LOG_LEVEL="WARNING",
)


# ---------------------------------------------------------------------------
# Database and application
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test; tables dropped afterwards."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_query_counter(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def app(engine):
    return create_app(test_settings, engine=engine)


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncSession:
    """A live session for tests that seed or inspect rows directly."""
    async with build_session_factory(engine)() as session:
        yield session


@pytest_asyncio.fixture
async def async_client(app) -> AsyncClient:
    """httpx client wired to the app through ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def lenient_client(app) -> AsyncClient:
    """Like ``async_client`` but returns 500 responses instead of raising."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ---------------------------------------------------------------------------
# Domain helpers
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def tokens() -> TokenCodec:
    return TokenCodec.from_settings(test_settings)


@pytest_asyncio.fixture
async def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest_asyncio.fixture
async def register_user(async_client: AsyncClient):
    """
    Factory registering a user over HTTP.

    Returns ``(user_id, headers)`` where *headers* authenticate as that user.
    """
    counter = itertools.count(1)

    async def _register(first_name: str = "Test", email: str | None = None) -> tuple[int, dict]:
        email = email or f"{first_name.lower()}{next(counter)}@mingle.io"
        resp = await async_client.post("/users/register", json={
            "email": email,
            "firstName": first_name,
            "lastName": "User",
            "password": "pw",
        })
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["id"], {"Authorization": f"Bearer {body['token']}"}

    return _register
