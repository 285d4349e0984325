"""
Pytest configuration and shared fixtures for storefront tests.

Provides an in-memory SQLite session, an httpx client bound to the ASGI app,
token helpers, and seeded users/products.
"""
import pytest
from typing import AsyncGenerator

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from database import Base, get_db
from config import settings

# ── Test Configuration ───────────────────────────────────────────────
# Set test-only values for settings that would normally come from .env
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"


# ── Database Fixtures ────────────────────────────────────────────────


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    import db_models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client for the FastAPI app with the in-memory database.

    Overrides get_db dependency to use the test DB session.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    from middleware.rate_limit import _limiter
    _limiter.reset()
    yield
    _limiter.reset()


# ── Identity Fixtures ────────────────────────────────────────────────


def auth_headers(user_id: int, username: str, is_admin: bool = False) -> dict:
    """Authorization header with a valid JWT for the given identity."""
    from middleware.auth import issue_access_token

    token = issue_access_token(user_id=user_id, username=username, is_admin=is_admin)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def buyer_actor():
    from models import Actor
    return Actor(id=101, username="mya", is_admin=False)


@pytest.fixture
def admin_actor():
    from models import Actor
    return Actor(id=1, username="admin", is_admin=True)


@pytest.fixture
def buyer_headers(buyer_actor) -> dict:
    return auth_headers(buyer_actor.id, buyer_actor.username)


@pytest.fixture
def admin_headers(admin_actor) -> dict:
    return auth_headers(admin_actor.id, admin_actor.username, is_admin=True)


@pytest.fixture
def make_headers():
    """Factory fixture for headers of arbitrary identities."""
    return auth_headers


# ── Test Data Fixtures ────────────────────────────────────────────────


@pytest.fixture
async def buyer(db_session: AsyncSession, buyer_actor):
    """Ledger row for the buyer with 5000 credits."""
    from db_models import User

    user = User(id=buyer_actor.id, username=buyer_actor.username, credits=5000)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def sample_product(db_session: AsyncSession):
    """An available MPT top-up priced at 3000 credits."""
    from db_models import Product

    product = Product(
        operator="MPT",
        category="Data",
        name="MPT 5GB",
        price_mmk=3200,
        price_cr=3000,
        available=True,
    )
    db_session.add(product)
    await db_session.commit()
    await db_session.refresh(product)
    return product
