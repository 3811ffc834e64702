"""Integration tests for SQLAlchemyUserRepository on SQLite."""

import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from boilerplate.domain.entities.user import User
from boilerplate.domain.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    StorageError,
)
from boilerplate.infrastructure.repositories import user_repository_impl as repository_module

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_create_assigns_id_and_timestamps(user_repository):
    created = await user_repository.create(User(email="alice@example.com"))

    assert created.id > 0
    assert created.email == "alice@example.com"
    assert created.created_at == created.updated_at


@pytest.mark.asyncio
async def test_create_then_get_round_trip(user_repository):
    created = await user_repository.create(User(email="bob@example.com"))

    assert await user_repository.get_by_id(created.id) == created
    assert await user_repository.get_by_email("bob@example.com") == created


@pytest.mark.asyncio
async def test_ids_are_distinct(user_repository):
    first = await user_repository.create(User(email="one@example.com"))
    second = await user_repository.create(User(email="two@example.com"))

    assert first.id != second.id


@pytest.mark.asyncio
async def test_duplicate_email_on_create(user_repository):
    await user_repository.create(User(email="dup@example.com"))

    with pytest.raises(DuplicateRecordError) as exc_info:
        await user_repository.create(User(email="dup@example.com"))

    assert exc_info.value.operation == "create user"


@pytest.mark.asyncio
async def test_get_missing_user(user_repository):
    with pytest.raises(RecordNotFoundError):
        await user_repository.get_by_id(12345)

    with pytest.raises(RecordNotFoundError):
        await user_repository.get_by_email("ghost@example.com")


@pytest.mark.asyncio
async def test_update_changes_email_and_refreshes_updated_at(user_repository):
    created = await user_repository.create(User(email="old@example.com"))

    updated = await user_repository.update(created.with_email("new@example.com"))

    assert updated.id == created.id
    assert updated.email == "new@example.com"
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at
    assert await user_repository.get_by_email("new@example.com") == updated


@pytest.mark.asyncio
async def test_update_moves_updated_at_forward_when_clock_lags(user_repository, monkeypatch):
    """A clock that has not advanced, or stepped back, still yields a later updated_at."""
    created = await user_repository.create(User(email="clock@example.com"))
    monkeypatch.setattr(repository_module, "utcnow", lambda: datetime(2000, 1, 1))

    first = await user_repository.update(created.with_email("clock2@example.com"))
    second = await user_repository.update(first.with_email("clock3@example.com"))

    assert first.updated_at == created.updated_at + timedelta(microseconds=1)
    assert second.updated_at == first.updated_at + timedelta(microseconds=1)
    assert second.created_at == created.created_at


@pytest.mark.asyncio
async def test_update_missing_user(user_repository):
    with pytest.raises(RecordNotFoundError):
        await user_repository.update(User(id=999, email="x@example.com"))


@pytest.mark.asyncio
async def test_update_to_taken_email(user_repository):
    await user_repository.create(User(email="taken@example.com"))
    other = await user_repository.create(User(email="other@example.com"))

    with pytest.raises(DuplicateRecordError):
        await user_repository.update(other.with_email("taken@example.com"))


@pytest.mark.asyncio
async def test_update_without_id(user_repository):
    with pytest.raises(ValueError):
        await user_repository.update(User(email="x@example.com"))


@pytest.mark.asyncio
async def test_delete_is_idempotent(user_repository):
    created = await user_repository.create(User(email="gone@example.com"))

    await user_repository.delete(created.id)
    await user_repository.delete(created.id)

    with pytest.raises(RecordNotFoundError):
        await user_repository.get_by_id(created.id)


@pytest.mark.asyncio
async def test_list_newest_first_with_pagination(user_repository):
    created = [await user_repository.create(User(email=f"user{i}@example.com")) for i in range(5)]
    newest_first = [user.id for user in reversed(created)]

    assert [user.id for user in await user_repository.list(10, 0)] == newest_first
    assert [user.id for user in await user_repository.list(2, 1)] == newest_first[1:3]
    assert await user_repository.list(0, 0) == []
    assert await user_repository.list(10, 5) == []


@pytest.mark.asyncio
async def test_list_pages_newest_first(user_repository):
    a = await user_repository.create(User(email="a@example.com"))
    b = await user_repository.create(User(email="b@example.com"))
    c = await user_repository.create(User(email="c@example.com"))

    assert await user_repository.list(2, 0) == [c, b]
    assert await user_repository.list(2, 2) == [a]


@pytest.mark.asyncio
async def test_list_rejects_negative_arguments(user_repository):
    with pytest.raises(ValueError):
        await user_repository.list(-1, 0)

    with pytest.raises(ValueError):
        await user_repository.list(10, -1)


@pytest.mark.asyncio
async def test_driver_failure_is_wrapped(user_repository, test_engine):
    """Any other database failure surfaces as a plain StorageError."""
    async with test_engine.begin() as conn:
        await conn.exec_driver_sql("DROP TABLE users")

    with pytest.raises(StorageError) as exc_info:
        await user_repository.list(10, 0)

    assert type(exc_info.value) is StorageError
    assert exc_info.value.operation == "list users"
    assert isinstance(exc_info.value.__cause__, OperationalError)


@pytest.mark.asyncio
async def test_deadline_exceeded_is_wrapped(user_repository, monkeypatch):
    """A call that outlives its timeout raises StorageError."""
    original_factory = user_repository._session_factory

    class SlowSession:
        def __init__(self):
            self._session = original_factory()

        async def __aenter__(self):
            await asyncio.sleep(1)
            return await self._session.__aenter__()

        async def __aexit__(self, *exc_info):
            return await self._session.__aexit__(*exc_info)

    monkeypatch.setattr(user_repository, "_session_factory", SlowSession)

    with pytest.raises(StorageError, match="deadline"):
        await user_repository.get_by_id(1, timeout=0.01)
