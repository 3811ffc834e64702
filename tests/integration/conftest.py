"""Integration test fixtures.

Provides fixtures for integration testing with a real database and FastAPI client.
Uses SQLite in-memory database for fast, isolated tests.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from boilerplate.infrastructure.persistence.database import (
    Base,
    create_schema,
    create_session_factory,
)
from boilerplate.infrastructure.repositories import SQLAlchemyUserRepository
from boilerplate.main import create_app

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine using SQLite in-memory."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        # One shared connection, otherwise every connection sees its own empty database
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    await create_schema(engine)

    yield engine

    # Drop all tables after test
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a test session factory."""
    return create_session_factory(test_engine)


@pytest_asyncio.fixture
async def user_repository(test_session_factory) -> SQLAlchemyUserRepository:
    """SQLAlchemy repository over the in-memory database."""
    return SQLAlchemyUserRepository(test_session_factory)


@pytest.fixture
def client(settings, user_repository) -> Generator[TestClient]:
    """
    Create a FastAPI test client with test database.

    This client uses the real application but with an in-memory database.
    """
    app = create_app(settings, user_repository)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
