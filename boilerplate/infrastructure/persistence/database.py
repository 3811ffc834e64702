"""Database configuration, connection pool and session management."""

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from boilerplate.infrastructure.config.settings import Settings

logger = logging.getLogger(__name__)

# Seconds allowed for the start-up ping before the database counts as unreachable
DATABASE_PING_TIMEOUT = 10.0


class DatabaseConnectionError(Exception):
    """Raised when the database cannot be reached at start-up."""


# Base class for all ORM models
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def create_database_engine(settings: Settings) -> AsyncEngine:
    """Create SQLAlchemy async engine (and its connection pool) from settings.

    Args:
        settings: Application settings containing database configuration

    Returns:
        Configured AsyncEngine instance
    """
    return create_async_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
        connect_args={"command_timeout": settings.db_command_timeout},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory from engine.

    Args:
        engine: SQLAlchemy async engine

    Returns:
        Session factory that creates AsyncSession instances
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def verify_connection(
    engine: AsyncEngine, timeout: float = DATABASE_PING_TIMEOUT
) -> None:
    """Ping the database so start-up fails fast when it is unreachable.

    Raises:
        DatabaseConnectionError: If the ping fails or exceeds ``timeout``
    """
    try:
        async with asyncio.timeout(timeout):
            async with engine.connect() as connection:
                await connection.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, TimeoutError) as exc:
        raise DatabaseConnectionError(f"failed to ping database: {exc!r}") from exc

    logger.info("connected to the database")


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables declared on Base that do not exist yet."""
    # Register the models on Base.metadata
    from boilerplate.infrastructure.persistence.models import user_model  # noqa: F401

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def close_database(engine: AsyncEngine) -> None:
    """Close the connection pool.

    Must only be called once the HTTP server has stopped accepting work.
    """
    logger.info("closing database connection pool")
    await engine.dispose()
