"""Unit tests for UserService.

These tests use fake repositories to test the service layer in isolation
without a database.
"""

import asyncio

import pytest

from boilerplate.application.dtos.user_dto import CreateUserDTO, UpdateUserDTO
from boilerplate.domain.exceptions import AppError, ErrorCode, StorageError

pytestmark = pytest.mark.unit


class TestUserServiceCreate:
    """Test cases for creating users."""

    @pytest.mark.asyncio
    async def test_create_user_success(self, user_service, fake_user_repository):
        """Test successful user creation."""
        # Arrange
        dto = CreateUserDTO(email="newuser@example.com")

        # Act
        result = await user_service.create_user(dto)

        # Assert
        assert result.email == "newuser@example.com"
        assert result.id > 0
        assert result.created_at == result.updated_at

        # Verify user is in repository
        assert fake_user_repository.count() == 1

    @pytest.mark.asyncio
    async def test_create_user_assigns_distinct_ids(self, user_service):
        """Every created user gets its own identifier."""
        first = await user_service.create_user(CreateUserDTO(email="a@example.com"))
        second = await user_service.create_user(CreateUserDTO(email="b@example.com"))

        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_create_user_duplicate_email(self, user_service, fake_user_repository):
        """Test creating user with duplicate email raises CONFLICT."""
        # Arrange
        dto = CreateUserDTO(email="test@example.com")
        await user_service.create_user(dto)

        # Act & Assert
        with pytest.raises(AppError) as exc_info:
            await user_service.create_user(dto)

        assert exc_info.value.code is ErrorCode.CONFLICT
        assert exc_info.value.status == 409
        assert fake_user_repository.count() == 1


class TestUserServiceGet:
    """Test cases for reading users."""

    @pytest.mark.asyncio
    async def test_get_user_by_id(self, user_service_with_data, sample_user):
        result = await user_service_with_data.get_user_by_id(sample_user.id)

        assert result.email == sample_user.email

    @pytest.mark.asyncio
    async def test_get_user_by_id_not_found(self, user_service):
        """Test missing user raises NOT_FOUND."""
        with pytest.raises(AppError) as exc_info:
            await user_service.get_user_by_id(999)

        assert exc_info.value.code is ErrorCode.NOT_FOUND
        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_get_user_by_email(self, user_service_with_data, another_user):
        result = await user_service_with_data.get_user_by_email("another@example.com")

        assert result.id == another_user.id

    @pytest.mark.asyncio
    async def test_get_user_by_email_not_found(self, user_service):
        with pytest.raises(AppError) as exc_info:
            await user_service.get_user_by_email("nobody@example.com")

        assert exc_info.value.code is ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_create_then_get_returns_same_user(self, user_service):
        """Round trip through the repository keeps every field."""
        created = await user_service.create_user(CreateUserDTO(email="rt@example.com"))

        assert await user_service.get_user_by_id(created.id) == created
        assert await user_service.get_user_by_email("rt@example.com") == created


class TestUserServiceList:
    """Test cases for listing users."""

    @pytest.mark.asyncio
    async def test_list_users_newest_first(self, user_service_with_data, sample_user, another_user):
        result = await user_service_with_data.list_users()

        assert [user.id for user in result] == [another_user.id, sample_user.id]

    @pytest.mark.asyncio
    async def test_list_users_pagination(self, user_service_with_data, sample_user):
        result = await user_service_with_data.list_users(limit=1, offset=1)

        assert [user.id for user in result] == [sample_user.id]

    @pytest.mark.asyncio
    async def test_list_users_pages_newest_first(self, user_service):
        a = await user_service.create_user(CreateUserDTO(email="a@example.com"))
        b = await user_service.create_user(CreateUserDTO(email="b@example.com"))
        c = await user_service.create_user(CreateUserDTO(email="c@example.com"))

        assert await user_service.list_users(limit=2, offset=0) == [c, b]
        assert await user_service.list_users(limit=2, offset=2) == [a]

    @pytest.mark.asyncio
    async def test_list_users_zero_limit(self, user_service_with_data):
        assert await user_service_with_data.list_users(limit=0) == []

    @pytest.mark.asyncio
    async def test_list_users_offset_past_end(self, user_service_with_data):
        assert await user_service_with_data.list_users(offset=10) == []


class TestUserServiceUpdate:
    """Test cases for updating users."""

    @pytest.mark.asyncio
    async def test_update_user_email(self, user_service_with_data, sample_user):
        """Test email change keeps created_at and refreshes updated_at."""
        result = await user_service_with_data.update_user(
            sample_user.id, UpdateUserDTO(email="changed@example.com")
        )

        assert result.email == "changed@example.com"
        assert result.created_at == sample_user.created_at
        assert result.updated_at > sample_user.updated_at

    @pytest.mark.asyncio
    async def test_update_user_not_found(self, user_service):
        with pytest.raises(AppError) as exc_info:
            await user_service.update_user(999, UpdateUserDTO(email="x@example.com"))

        assert exc_info.value.code is ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_update_user_to_taken_email(self, user_service_with_data, sample_user):
        with pytest.raises(AppError) as exc_info:
            await user_service_with_data.update_user(
                sample_user.id, UpdateUserDTO(email="another@example.com")
            )

        assert exc_info.value.code is ErrorCode.CONFLICT


class TestUserServiceDelete:
    """Test cases for deleting users."""

    @pytest.mark.asyncio
    async def test_delete_user(self, user_service_with_data, sample_user):
        await user_service_with_data.delete_user(sample_user.id)

        with pytest.raises(AppError) as exc_info:
            await user_service_with_data.get_user_by_id(sample_user.id)
        assert exc_info.value.code is ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_user_is_idempotent(self, user_service_with_data, sample_user):
        """Deleting a missing user succeeds."""
        await user_service_with_data.delete_user(sample_user.id)
        await user_service_with_data.delete_user(sample_user.id)
        await user_service_with_data.delete_user(999)


class TestUserServiceFailures:
    """Storage failures and deadlines."""

    @pytest.mark.asyncio
    async def test_storage_failure_becomes_internal_error(
        self, user_service, fake_user_repository
    ):
        fake_user_repository.fail("connection refused")

        with pytest.raises(AppError) as exc_info:
            await user_service.list_users()

        assert exc_info.value.code is ErrorCode.INTERNAL
        assert "connection refused" not in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, StorageError)

    @pytest.mark.asyncio
    async def test_timeout_is_passed_to_repository(self, user_service, fake_user_repository):
        await user_service.create_user(CreateUserDTO(email="t@example.com"))
        await user_service.list_users()

        assert fake_user_repository.timeouts == [2.5, 2.5]

    @pytest.mark.asyncio
    async def test_cancellation_is_not_translated(self, user_service, fake_user_repository):
        """A cancelled request stays cancelled; it is not turned into an AppError."""
        fake_user_repository.fail_with = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await user_service.get_user_by_id(1)
