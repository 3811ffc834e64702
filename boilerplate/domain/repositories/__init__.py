"""Repository interfaces - define contracts for data access."""

from boilerplate.domain.repositories.user_repository import IUserRepository

__all__ = ["IUserRepository"]
