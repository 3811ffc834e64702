"""User repository implementation using SQLAlchemy."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from boilerplate.domain.entities.user import User
from boilerplate.domain.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    StorageError,
)
from boilerplate.domain.repositories.user_repository import IUserRepository
from boilerplate.infrastructure.persistence.models.user_model import UserModel, utcnow

# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"

# Smallest step a PostgreSQL timestamp can record
TIMESTAMP_RESOLUTION = timedelta(microseconds=1)


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Tell a unique-constraint violation apart from other integrity errors."""
    code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    # SQLite reports "UNIQUE constraint failed: users.email"
    return "unique" in str(exc.orig).lower()


def _next_updated_at(previous: datetime) -> datetime:
    """Current time, or just after ``previous`` when the clock has not moved past it."""
    return max(utcnow(), previous + TIMESTAMP_RESOLUTION)


class SQLAlchemyUserRepository(IUserRepository):
    """
    SQLAlchemy implementation of IUserRepository.

    This class contains all database-specific code and depends on:
    - SQLAlchemy (infrastructure)
    - UserModel (infrastructure ORM mapping)

    Every operation opens a short-lived session from the pool and runs in
    its own transaction. Update reads the row under a lock before writing
    it; every other operation is a single statement. Writes use RETURNING
    so the stored row comes back in the same round trip. It returns domain
    entities, never ORM models.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize repository with a session factory.

        Args:
            session_factory: SQLAlchemy async session factory bound to the pool
        """
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(
        self, operation: str, timeout: float | None
    ) -> AsyncIterator[AsyncSession]:
        """Run one statement in its own transaction, wrapping storage failures."""
        try:
            async with asyncio.timeout(timeout):
                async with self._session_factory() as session, session.begin():
                    yield session
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateRecordError(operation) from exc
            raise StorageError(operation, str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise StorageError(operation, str(exc)) from exc
        except TimeoutError as exc:
            raise StorageError(operation, f"deadline of {timeout}s exceeded") from exc
        except OSError as exc:
            raise StorageError(operation, str(exc)) from exc

    async def create(self, user: User, *, timeout: float | None = None) -> User:
        """Insert a user; both timestamps are set to the same instant."""
        now = utcnow()
        stmt = (
            insert(UserModel)
            .values(email=user.email, created_at=now, updated_at=now)
            .returning(UserModel)
        )

        async with self._transaction("create user", timeout) as session:
            user_model = (await session.scalars(stmt)).one()
            return user_model.to_entity()

    async def get_by_id(self, id: int, *, timeout: float | None = None) -> User:
        """Get user by ID."""
        async with self._transaction("get user by id", timeout) as session:
            user_model = await session.scalar(select(UserModel).where(UserModel.id == id))

            if user_model is None:
                raise RecordNotFoundError("get user by id")

            return user_model.to_entity()

    async def get_by_email(self, email: str, *, timeout: float | None = None) -> User:
        """Get user by email address."""
        async with self._transaction("get user by email", timeout) as session:
            user_model = await session.scalar(
                select(UserModel).where(UserModel.email == email)
            )

            if user_model is None:
                raise RecordNotFoundError("get user by email")

            return user_model.to_entity()

    async def update(self, user: User, *, timeout: float | None = None) -> User:
        """
        Set a new email and move updated_at strictly forward.

        The row is locked while its current updated_at is read, then
        rewritten in the same transaction.
        """
        if user.id is None:
            raise ValueError("Cannot update user without ID")

        async with self._transaction("update user", timeout) as session:
            previous = await session.scalar(
                select(UserModel.updated_at).where(UserModel.id == user.id).with_for_update()
            )

            if previous is None:
                raise RecordNotFoundError("update user")

            stmt = (
                update(UserModel)
                .where(UserModel.id == user.id)
                .values(email=user.email, updated_at=_next_updated_at(previous))
                .returning(UserModel)
                .execution_options(synchronize_session=False)
            )
            user_model = (await session.scalars(stmt)).one()
            return user_model.to_entity()

    async def delete(self, id: int, *, timeout: float | None = None) -> None:
        """Delete user by ID; a missing row is not an error."""
        stmt = (
            delete(UserModel)
            .where(UserModel.id == id)
            .execution_options(synchronize_session=False)
        )

        async with self._transaction("delete user", timeout) as session:
            await session.execute(stmt)

    async def list(
        self, limit: int, offset: int, *, timeout: float | None = None
    ) -> list[User]:
        """Get a page of users ordered by creation time, newest first."""
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be non-negative")

        stmt = (
            select(UserModel)
            .order_by(UserModel.created_at.desc(), UserModel.id.desc())
            .limit(limit)
            .offset(offset)
        )

        async with self._transaction("list users", timeout) as session:
            result = await session.scalars(stmt)
            return [user_model.to_entity() for user_model in result]
