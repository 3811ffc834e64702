"""User repository interface."""

from abc import ABC, abstractmethod

from boilerplate.domain.entities.user import User


class IUserRepository(ABC):
    """
    Persistence contract for the User entity.

    This interface belongs to the DOMAIN layer. The repository is the only
    component allowed to read or write stored users. Each operation is a
    single statement with no retries and no transaction spanning calls.

    Every operation accepts a keyword-only ``timeout`` (seconds). When it
    elapses the pending storage call is abandoned and a StorageError is
    raised. Task cancellation is never swallowed.

    Failures:
        RecordNotFoundError: No row matches the requested key
        DuplicateRecordError: A write violates the unique email constraint
        StorageError: Any other connectivity or driver failure
    """

    @abstractmethod
    async def create(self, user: User, *, timeout: float | None = None) -> User:
        """
        Persist a new user.

        Args:
            user: User carrying the email (any ID is ignored)
            timeout: Optional deadline in seconds

        Returns:
            The stored user with server-assigned ID and timestamps

        Raises:
            DuplicateRecordError: If the email is already registered
            StorageError: On any other storage failure
        """

    @abstractmethod
    async def get_by_id(self, id: int, *, timeout: float | None = None) -> User:
        """
        Retrieve a user by ID.

        Raises:
            RecordNotFoundError: If no user has this ID
        """

    @abstractmethod
    async def get_by_email(self, email: str, *, timeout: float | None = None) -> User:
        """
        Retrieve a user by email address.

        Raises:
            RecordNotFoundError: If no user has this email
        """

    @abstractmethod
    async def update(self, user: User, *, timeout: float | None = None) -> User:
        """
        Store a new email for an existing user and move ``updated_at`` strictly
        forward, even when the clock has not advanced since the last write.

        Args:
            user: User carrying the existing ID and the new email

        Returns:
            The updated user

        Raises:
            ValueError: If the user has no ID
            RecordNotFoundError: If the ID does not exist
            DuplicateRecordError: If another user already has the email
        """

    @abstractmethod
    async def delete(self, id: int, *, timeout: float | None = None) -> None:
        """
        Delete a user by ID.

        Deletion is idempotent: deleting a missing ID is not an error.
        """

    @abstractmethod
    async def list(
        self, limit: int, offset: int, *, timeout: float | None = None
    ) -> list[User]:
        """
        Retrieve a page of users, most recently created first.

        No upper bound is enforced on ``limit``; callers are expected to
        guard against oversized pages.

        Args:
            limit: Maximum number of users to return (>= 0)
            offset: Number of users to skip (>= 0)

        Returns:
            List of users, empty when the page is past the last row

        Raises:
            ValueError: If limit or offset is negative
        """
