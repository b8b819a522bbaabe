"""
Single-use, time-bounded password reset tokens.
"""

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rentals.database import Base
from datetime import datetime, timezone
from typing import TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from rentals.models.user import User


class PasswordReset(Base):
    __tablename__ = "password_resets"

    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    user: Mapped["User"] = relationship("User", back_populates="password_resets")

    def is_expired(self, now: datetime) -> bool:
        """
        Check expiry against an aware UTC timestamp.
        SQLite hands back naive datetimes, which are stored as UTC.
        """
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= now

    def is_usable(self, now: datetime) -> bool:
        return not self.used and not self.is_expired(now)
