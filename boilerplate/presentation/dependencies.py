"""FastAPI dependency injection setup.

This module is the COMPOSITION ROOT for request-scoped objects.

The concrete repository is chosen once, at startup, and stored on
``app.state`` by ``create_app``. Endpoints only ever see the UserService,
which only knows the IUserRepository interface:

    get_app_settings() ─┐
                        ├→ get_user_service() → endpoint
    get_user_repository()┘

In tests, pass a FakeUserRepository to ``create_app`` or override
``get_user_repository`` with ``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from boilerplate.application.services.user_service import UserService
from boilerplate.domain.repositories.user_repository import IUserRepository
from boilerplate.infrastructure.config.settings import Settings


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_user_repository(request: Request) -> IUserRepository:
    """
    Repository configured for this application.

    Raises:
        RuntimeError: If the application was created without a repository
    """
    repository = request.app.state.user_repository
    if repository is None:
        raise RuntimeError("user repository is not configured")
    return repository


def get_user_service(
    repository: IUserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_app_settings),
) -> UserService:
    """
    Dependency that provides UserService.

    Every storage call made by the service is bounded by
    ``settings.request_timeout``.
    """
    return UserService(repository, timeout=settings.request_timeout)
