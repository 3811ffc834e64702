"""User service - application layer business logic."""

from boilerplate.application.dtos.user_dto import CreateUserDTO, UpdateUserDTO, UserDTO
from boilerplate.application.exceptions import translate_storage_error
from boilerplate.domain.entities.user import User
from boilerplate.domain.exceptions import StorageError
from boilerplate.domain.repositories.user_repository import IUserRepository

RESOURCE_NAME = "User"


class UserService:
    """
    User service encapsulating user-related use cases.

    This service:
    1. Depends on the IUserRepository abstraction (not a concrete implementation)
    2. Classifies storage failures into AppErrors (NOT_FOUND, CONFLICT, INTERNAL_ERROR)
    3. Uses domain entities internally
    4. Returns DTOs to the presentation layer

    The service never renders or logs errors; it raises AppError and lets
    the presentation layer convert it to a response once.
    """

    def __init__(self, repository: IUserRepository, timeout: float | None = None):
        """
        Initialize service with dependencies.

        Args:
            repository: User repository (abstraction, not concrete class)
            timeout: Deadline in seconds applied to every repository call

        Example:
            # Production
            service = UserService(SQLAlchemyUserRepository(session_factory), timeout=5)

            # Testing
            service = UserService(FakeUserRepository())
        """
        self._repository = repository
        self._timeout = timeout

    async def create_user(self, dto: CreateUserDTO) -> UserDTO:
        """
        Create a new user.

        Raises:
            AppError: CONFLICT if the email already exists
        """
        try:
            created_user = await self._repository.create(
                User(email=dto.email), timeout=self._timeout
            )
        except StorageError as exc:
            raise translate_storage_error(exc, RESOURCE_NAME) from exc

        return UserDTO.from_entity(created_user)

    async def get_user_by_id(self, user_id: int) -> UserDTO:
        """
        Retrieve user by ID.

        Raises:
            AppError: NOT_FOUND if the user doesn't exist
        """
        try:
            user = await self._repository.get_by_id(user_id, timeout=self._timeout)
        except StorageError as exc:
            raise translate_storage_error(exc, RESOURCE_NAME) from exc

        return UserDTO.from_entity(user)

    async def get_user_by_email(self, email: str) -> UserDTO:
        """
        Retrieve user by email.

        Raises:
            AppError: NOT_FOUND if no user has this email
        """
        try:
            user = await self._repository.get_by_email(email, timeout=self._timeout)
        except StorageError as exc:
            raise translate_storage_error(exc, RESOURCE_NAME) from exc

        return UserDTO.from_entity(user)

    async def list_users(self, limit: int = 100, offset: int = 0) -> list[UserDTO]:
        """
        Get a page of users, newest first.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
        """
        try:
            users = await self._repository.list(limit, offset, timeout=self._timeout)
        except StorageError as exc:
            raise translate_storage_error(exc, RESOURCE_NAME) from exc

        return [UserDTO.from_entity(user) for user in users]

    async def update_user(self, user_id: int, dto: UpdateUserDTO) -> UserDTO:
        """
        Change a user's email.

        Raises:
            AppError: NOT_FOUND if the user doesn't exist,
                CONFLICT if the email is taken by another user
        """
        try:
            updated_user = await self._repository.update(
                User(id=user_id, email=dto.email), timeout=self._timeout
            )
        except StorageError as exc:
            raise translate_storage_error(exc, RESOURCE_NAME) from exc

        return UserDTO.from_entity(updated_user)

    async def delete_user(self, user_id: int) -> None:
        """Delete a user. Deleting a missing user succeeds."""
        try:
            await self._repository.delete(user_id, timeout=self._timeout)
        except StorageError as exc:
            raise translate_storage_error(exc, RESOURCE_NAME) from exc
