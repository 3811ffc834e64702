"""User ORM model - infrastructure layer SQLAlchemy mapping."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from boilerplate.domain.entities.user import User
from boilerplate.infrastructure.persistence.database import Base


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (columns are TIMESTAMP without zone)."""
    return datetime.now(UTC).replace(tzinfo=None)


class UserModel(Base):
    """
    SQLAlchemy ORM model for users table.

    This is an INFRASTRUCTURE detail that maps domain entities to database rows.
    The domain layer never imports this class.
    """

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # User information
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation of UserModel."""
        return f"UserModel(id={self.id!r}, email={self.email!r})"

    def to_entity(self) -> User:
        """
        Convert ORM model to domain entity.

        Returns:
            User domain entity
        """
        return User(
            id=self.id,
            email=self.email,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
