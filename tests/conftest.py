"""Pytest configuration and fixtures.

This file contains shared fixtures that can be used across all tests.

These fixtures follow the Dependency Inversion Principle:
- Use fake implementations (FakeUserRepository)
- Tests run fast (no database)
- Tests are isolated (each test gets fresh fakes)
"""

from datetime import UTC, datetime, timedelta

import pytest

from boilerplate.application.services.user_service import UserService
from boilerplate.domain.entities.user import User
from boilerplate.infrastructure.config.settings import Settings
from tests.fakes.user_repository_fake import FakeUserRepository


@pytest.fixture
def settings() -> Settings:
    """Settings for tests, independent of the developer's environment and .env."""
    return Settings(
        _env_file=None,
        environment="test",
        app_name="boilerplate-test",
        app_version="9.9.9",
        server_host="127.0.0.1",
        server_port=0,
        request_timeout=5.0,
        shutdown_timeout=5.0,
        cors_origins="http://allowed.example",
    )


@pytest.fixture
def sample_user() -> User:
    """Create a sample persisted user for testing."""
    created_at = datetime.now(UTC) - timedelta(minutes=5)
    return User(
        id=1,
        email="test@example.com",
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def another_user() -> User:
    """Create another sample user, created after sample_user."""
    created_at = datetime.now(UTC) - timedelta(minutes=1)
    return User(
        id=2,
        email="another@example.com",
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def fake_user_repository() -> FakeUserRepository:
    """
    Provide a fresh FakeUserRepository for each test.

    This ensures tests are isolated and don't affect each other.
    """
    return FakeUserRepository()


@pytest.fixture
def fake_user_repository_with_users(sample_user, another_user) -> FakeUserRepository:
    """Provide a FakeUserRepository pre-populated with users."""
    return FakeUserRepository(initial_data=[sample_user, another_user])


@pytest.fixture
def user_service(fake_user_repository) -> UserService:
    """
    Provide a UserService backed by the fake repository.

    Tests run fast and are fully deterministic.
    """
    return UserService(fake_user_repository, timeout=2.5)


@pytest.fixture
def user_service_with_data(fake_user_repository_with_users) -> UserService:
    """Provide a UserService with pre-populated data."""
    return UserService(fake_user_repository_with_users, timeout=2.5)

