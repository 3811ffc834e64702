"""Repository implementations using SQLAlchemy."""

from boilerplate.infrastructure.repositories.user_repository_impl import SQLAlchemyUserRepository

__all__ = ["SQLAlchemyUserRepository"]
