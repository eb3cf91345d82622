"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cityfix.db.base import Base
# Import all models to register with Base.metadata
import cityfix.db.models  # noqa: F401


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(db_engine):
    """Create a test application instance with in-memory DB."""
    from cityfix.main import create_app

    _app = create_app()
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = session_factory
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register(client, name="Alice", email="alice@example.com", password="secret123") -> dict:
    response = await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def alice(client):
    """Registered user: ``{"token", "user", "headers"}``."""
    body = await register(client)
    return {**body, "headers": {"Authorization": f"Bearer {body['token']}"}}


@pytest.fixture
async def bob(client):
    body = await register(client, name="Bob", email="bob@example.com")
    return {**body, "headers": {"Authorization": f"Bearer {body['token']}"}}


@pytest.fixture
def png_bytes() -> bytes:
    """PNG signature plus filler; the server stores images without decoding them."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 256
