"""
Activity log entries shown on the admin dashboard.
"""

from sqlalchemy import String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from rentals.database import Base
from typing import Optional
import enum
import json


class ActivityType(str, enum.Enum):
    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    LISTING_CREATED = "LISTING_CREATED"
    LISTING_UPDATED = "LISTING_UPDATED"
    LISTING_DELETED = "LISTING_DELETED"
    REPORT_CREATED = "REPORT_CREATED"
    REPORT_RESOLVED = "REPORT_RESOLVED"


class Activity(Base):
    __tablename__ = "activities"

    type: Mapped[ActivityType] = mapped_column(
        SQLEnum(ActivityType, name="activity_type"),
        nullable=False,
        index=True
    )

    description: Mapped[str] = mapped_column(String(500), nullable=False)

    metadata_json: Mapped[Optional[str]] = mapped_column("metadata", Text, nullable=True)

    @property
    def details(self) -> dict:
        if not self.metadata_json:
            return {}
        try:
            parsed = json.loads(self.metadata_json)
        except ValueError:
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "type": self.type.value,
            "description": self.description,
            "metadata": self.details,
            "created_at": self.created_at.isoformat(),
        }
