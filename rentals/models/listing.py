"""
Listing model and the favorites association table.
List-valued attributes are stored as encoded text, see rentals.utils.list_codec.
"""

from sqlalchemy import (
    String, Text, Integer, Float, Numeric, Boolean, DateTime, ForeignKey, Table, Column, Index, Uuid,
    Enum as SQLEnum
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import inspect
from rentals.database import Base, utcnow
from rentals.utils import list_codec
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING
import enum
import uuid

if TYPE_CHECKING:
    from rentals.models.user import User
    from rentals.models.report import Report


class ListingStatus(str, enum.Enum):
    """Listing lifecycle states; deletion is a hard delete."""
    AVAILABLE = "AVAILABLE"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"


# States an admin may assign through the moderation endpoint
MODERATION_STATUSES = (ListingStatus.ACTIVE, ListingStatus.INACTIVE, ListingStatus.PENDING)

DEFAULT_PROPERTY_TYPE = "APARTMENT"
DEFAULT_LEASE_TYPE = "LONG_TERM"


favorites = Table(
    "favorites",
    Base.metadata,
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("listing_id", Uuid(as_uuid=True), ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
)


class Listing(Base):
    """
    Rental property record owned by a user.
    """

    __tablename__ = "listings"

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, index=True)

    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    bathrooms: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="Area in square feet")

    status: Mapped[ListingStatus] = mapped_column(
        SQLEnum(ListingStatus, name="listing_status"),
        nullable=False,
        default=ListingStatus.AVAILABLE,
        index=True
    )

    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    property_type: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_PROPERTY_TYPE)

    lease_type: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_LEASE_TYPE)

    landlord_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    landlord_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Encoded list fields
    images: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    amenities: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    building_amenities: Mapped[str] = mapped_column(Text, nullable=False, default="[]")

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    owner: Mapped["User"] = relationship("User", back_populates="listings", lazy="joined")

    reports: Mapped[List["Report"]] = relationship(
        "Report",
        back_populates="listing",
        passive_deletes=True
    )

    favorited_by: Mapped[List["User"]] = relationship(
        "User",
        secondary="favorites",
        back_populates="favorites",
        passive_deletes=True
    )

    __table_args__ = (
        Index("idx_listing_status_created", "status", "created_at"),
        Index("idx_listing_featured_created", "featured", "created_at"),
        Index("idx_listing_owner_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title}, status={self.status})>"

    @property
    def image_list(self) -> List[str]:
        return list_codec.decode(self.images)

    @property
    def amenity_list(self) -> List[str]:
        return list_codec.decode(self.amenities)

    @property
    def building_amenity_list(self) -> List[str]:
        return list_codec.decode(self.building_amenities)

    def to_dict(self) -> dict:
        """
        Convert listing to dictionary with decoded list fields.
        The owner summary is included when the relationship is loaded.
        """
        data = {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "location": self.location,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "size": self.size,
            "status": self.status.value,
            "featured": self.featured,
            "property_type": self.property_type,
            "lease_type": self.lease_type,
            "landlord_email": self.landlord_email,
            "landlord_phone": self.landlord_phone,
            "images": self.image_list,
            "amenities": self.amenity_list,
            "building_amenities": self.building_amenity_list,
            "user_id": str(self.user_id),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "user": None,
        }

        if "owner" not in inspect(self).unloaded and self.owner is not None:
            data["user"] = self.owner.to_summary()

        return data
