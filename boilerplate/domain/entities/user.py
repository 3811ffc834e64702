"""User domain entity - pure business logic, no infrastructure."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from boilerplate.domain.exceptions import AppError


@dataclass(frozen=True)
class User:
    """
    User domain entity representing the business concept of a user.

    This is a pure Python class with NO dependencies on SQLAlchemy,
    FastAPI, or any framework. It is frozen: the repository returns a new
    instance for every persisted state, so the identifier can never be
    reassigned after creation.
    """

    email: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """
        Validate entity invariants at construction time.

        Full email syntax is checked at the API boundary; the entity only
        guarantees it never holds an obviously broken address.
        """
        if not self.email or "@" not in self.email:
            raise AppError.validation(
                f"Invalid email address: '{self.email}'. Email must contain '@' symbol."
            )

        if (
            self.created_at is not None
            and self.updated_at is not None
            and self.updated_at < self.created_at
        ):
            raise AppError.validation("updated_at cannot be earlier than created_at")

    @property
    def is_persisted(self) -> bool:
        """True once the repository has assigned an ID and timestamps."""
        return (
            self.id is not None
            and self.created_at is not None
            and self.updated_at is not None
        )

    def with_email(self, new_email: str) -> "User":
        """
        Return a copy of this user carrying a new email.

        Only the email is mutable; the repository refreshes ``updated_at``
        when the copy is persisted.

        Raises:
            AppError: VALIDATION_ERROR if the email is invalid
        """
        return replace(self, email=new_email)
