"""User DTOs for application layer using Pydantic."""

from datetime import datetime
from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field

from boilerplate.domain.entities.user import User


def strip_whitespace(v: str | None) -> str | None:
    """Strip whitespace from string values."""
    return v.strip() if isinstance(v, str) else v


def check_email_address(v: str) -> str:
    """
    Validate an email address without rewriting it.

    The address is stored and looked up exactly as the client sent it, so
    the normalized form email-validator computes is discarded.
    """
    try:
        validate_email(v, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(str(exc)) from exc
    return v


EmailAddress = Annotated[
    str,
    BeforeValidator(strip_whitespace),
    AfterValidator(check_email_address),
    Field(json_schema_extra={"format": "email"}),
]


class CreateUserDTO(BaseModel):
    """
    DTO for creating a user.

    Validation:
    - email: Must be a valid email address, surrounding whitespace trimmed,
      otherwise kept as given
    """

    email: EmailAddress

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
            }
        }
    )


class UpdateUserDTO(BaseModel):
    """
    DTO for updating a user.

    Email is the only mutable attribute, so it is required.
    """

    email: EmailAddress

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "newemail@example.com",
            }
        }
    )


class UserDTO(BaseModel):
    """DTO for returning user data to presentation layer."""

    id: int
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, user: User) -> "UserDTO":
        """
        Convert a PERSISTED domain entity to DTO.

        Args:
            user: User domain entity (must be persisted)

        Returns:
            UserDTO instance

        Raises:
            ValueError: If the entity has not been persisted
        """
        if not user.is_persisted:
            raise ValueError(
                "Cannot create UserDTO from non-persisted entity. "
                "Ensure the entity has been saved via repository before converting to DTO."
            )

        return cls(
            id=user.id,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
