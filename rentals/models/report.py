"""
Report model for user-raised moderation flags.
"""

from sqlalchemy import String, Text, ForeignKey, Index, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import inspect
from rentals.database import Base
from typing import Optional, TYPE_CHECKING
import enum
import uuid

if TYPE_CHECKING:
    from rentals.models.user import User
    from rentals.models.listing import Listing


class ReportType(str, enum.Enum):
    LISTING = "LISTING"
    USER = "USER"


class ReportStatus(str, enum.Enum):
    """PENDING moves to RESOLVED or REJECTED."""
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


class Report(Base):
    """
    Moderation flag raised by a user against a listing or another user.
    Survives deletion of the reported listing with its listing backref cleared.
    """

    __tablename__ = "reports"

    type: Mapped[ReportType] = mapped_column(
        SQLEnum(ReportType, name="report_type"),
        nullable=False,
        index=True
    )

    target_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    reason: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[ReportStatus] = mapped_column(
        SQLEnum(ReportStatus, name="report_status"),
        nullable=False,
        default=ReportStatus.PENDING,
        index=True
    )

    reporter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    listing_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    reporter: Mapped["User"] = relationship("User", back_populates="reports", lazy="joined")

    listing: Mapped[Optional["Listing"]] = relationship("Listing", back_populates="reports", lazy="joined")

    __table_args__ = (
        Index("idx_report_type_status", "type", "status"),
    )

    def __repr__(self) -> str:
        return f"<Report(id={self.id}, type={self.type}, status={self.status})>"

    def to_dict(self) -> dict:
        state = inspect(self)
        data = {
            "id": str(self.id),
            "type": self.type.value,
            "target_id": self.target_id,
            "reason": self.reason,
            "description": self.description,
            "status": self.status.value,
            "reporter_id": str(self.reporter_id),
            "listing_id": str(self.listing_id) if self.listing_id else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "reporter": None,
            "listing": None,
        }

        if "reporter" not in state.unloaded and self.reporter is not None:
            data["reporter"] = self.reporter.to_summary()
        if "listing" not in state.unloaded and self.listing is not None:
            data["listing"] = self.listing.to_dict()

        return data
