"""
Pydantic schemas for listing requests and responses.
List-valued fields are accepted either as arrays or as encoded strings.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Union
from datetime import datetime
from decimal import Decimal
from rentals.models.listing import ListingStatus, DEFAULT_PROPERTY_TYPE, DEFAULT_LEASE_TYPE
from rentals.schemas.user import UserSummary


ListFieldInput = Optional[Union[List[str], str]]


class ListingBase(BaseModel):
    """Base listing schema with common fields."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Listing title",
        examples=["Sunny 2BR near the park"]
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="Detailed listing description"
    )

    price: Decimal = Field(..., ge=0, description="Monthly rent", examples=[2400])

    location: str = Field(..., min_length=1, max_length=255, examples=["Toronto, ON"])

    bedrooms: int = Field(..., ge=0, le=50, description="Number of bedrooms", examples=[2])

    bathrooms: float = Field(..., ge=0, le=50, description="Number of bathrooms", examples=[1.5])

    size: int = Field(0, ge=0, le=1000000, description="Area in square feet", examples=[850])

    @field_validator("title", "description", "location")
    @classmethod
    def strip_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class ListingCreate(ListingBase):
    """Schema for creating a new listing."""

    property_type: str = Field(DEFAULT_PROPERTY_TYPE, max_length=50, examples=["CONDO"])
    lease_type: str = Field(DEFAULT_LEASE_TYPE, max_length=50, examples=["LONG_TERM"])
    status: ListingStatus = Field(ListingStatus.AVAILABLE, description="Initial status")
    featured: bool = Field(False, description="Honoured for admins only")
    landlord_email: Optional[EmailStr] = None
    landlord_phone: Optional[str] = Field(None, max_length=50)
    images: ListFieldInput = Field(None, description="Image URLs or site-relative paths")
    amenities: ListFieldInput = None
    building_amenities: ListFieldInput = None


class ListingUpdate(BaseModel):
    """Partial update; only fields present in the request are written."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=10000)
    price: Optional[Decimal] = Field(None, ge=0)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[float] = Field(None, ge=0, le=50)
    size: Optional[int] = Field(None, ge=0, le=1000000)
    property_type: Optional[str] = Field(None, max_length=50)
    lease_type: Optional[str] = Field(None, max_length=50)
    status: Optional[ListingStatus] = None
    featured: Optional[bool] = None
    landlord_email: Optional[EmailStr] = None
    landlord_phone: Optional[str] = Field(None, max_length=50)
    images: Optional[Union[List[str], str, dict, int, float]] = None
    amenities: Optional[Union[List[str], str, dict, int, float]] = None
    building_amenities: Optional[Union[List[str], str, dict, int, float]] = None


class AdminListingUpdate(BaseModel):
    status: Optional[str] = Field(None, description="ACTIVE, INACTIVE or PENDING")
    featured: Optional[bool] = None


class ListingResponse(BaseModel):
    """Schema for listing response data."""

    id: str
    title: str
    description: str
    price: float
    location: str
    bedrooms: int
    bathrooms: float
    size: int
    status: ListingStatus
    featured: bool
    property_type: str
    lease_type: str
    landlord_email: Optional[str] = None
    landlord_phone: Optional[str] = None
    images: List[str]
    amenities: List[str]
    building_amenities: List[str]
    user_id: str
    created_at: datetime
    updated_at: datetime
    user: Optional[UserSummary] = None


class ListingListResponse(BaseModel):
    """Paginated listing results."""

    items: List[ListingResponse]
    total: int = Field(..., description="Total number of matching listings")
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class ListingMutationResponse(BaseModel):
    success: bool = True
    message: str
    listing: ListingResponse


class SuccessResponse(BaseModel):
    success: bool = True
