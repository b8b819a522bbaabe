"""
User model with authentication and role management.
Accounts are created by sign-up or on first OAuth login.
"""

from sqlalchemy import String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rentals.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING
import enum

if TYPE_CHECKING:
    from rentals.models.listing import Listing
    from rentals.models.report import Report
    from rentals.models.notification import Notification
    from rentals.models.password_reset import PasswordReset

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """
    Marketplace account.
    OAuth-only accounts have no password hash and cannot use credential login.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    hashed_password: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Bcrypt hashed password, null for OAuth-only accounts"
    )

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.USER,
        index=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    email_verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )

    # Collections are deleted by the database (ON DELETE CASCADE)
    listings: Mapped[List["Listing"]] = relationship(
        "Listing",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    reports: Mapped[List["Report"]] = relationship(
        "Report",
        back_populates="reporter",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    notifications: Mapped[List["Notification"]] = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    password_resets: Mapped[List["PasswordReset"]] = relationship(
        "PasswordReset",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    favorites: Mapped[List["Listing"]] = relationship(
        "Listing",
        secondary="favorites",
        back_populates="favorited_by",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized, lower-cased email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """Hash a password using bcrypt."""
        if not password or len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash; always False without one."""
        if not self.hashed_password:
            return False
        return pwd_context.verify(password, self.hashed_password)

    def set_password(self, password: str) -> None:
        self.hashed_password = self.hash_password(password)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def has_password(self) -> bool:
        return bool(self.hashed_password)

    def to_summary(self) -> dict:
        """Public fields embedded in listing and report responses."""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "image": self.image,
        }

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excluding sensitive data).

        Returns:
            Dictionary representation of user
        """
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "image": self.image,
            "role": self.role.value,
            "is_active": self.is_active,
            "email_verified_at": self.email_verified_at.isoformat() if self.email_verified_at else None,
            "has_password": self.has_password,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
