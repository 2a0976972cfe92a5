"""
Test infrastructure for the social feed API.

Strategy
--------
- SQLite in-memory via aiosqlite, with StaticPool so every task shares the
  one connection an in-memory database lives on.
- aiosqlite's own implicit BEGIN is switched off and SQLAlchemy emits BEGIN
  itself, the documented recipe that makes SAVEPOINT (``begin_nested``)
  behave; foreign keys are switched on so ``ON DELETE CASCADE`` applies.
- The app's get_db dependency is overridden with the test session factory.
- All tables are created fresh before each test and dropped after.
- Redis is disabled by setting ``cache._redis = None``; the CacheManager
  treats that as a permanent miss, so service code always reads the DB.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.cache import cache
from app.middleware import install_query_counter
from app.models import User
from app.security import create_access_token

# ---------------------------------------------------------------------------
# Test database engine — SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine_test.sync_engine, "connect")
def _sqlite_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@event.listens_for(engine_test.sync_engine, "begin")
def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override — replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    cache._redis = None
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live AsyncSession for calling service functions directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession):
    """
    Factory fixture: ``await make_user("alice")`` inserts a user and returns it.

    The row is committed so HTTP requests (which use their own session)
    can see it.
    """
    async def _make(username: str) -> User:
        user = User(username=username, email=f"{username}@example.com", name=username.title())
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


def auth(user: User | int) -> dict[str, str]:
    """Authorization header carrying a bearer token for *user*."""
    user_id = user if isinstance(user, int) else user.id
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def auth_headers():
    return auth
