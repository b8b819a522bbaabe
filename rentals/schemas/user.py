"""
Pydantic schemas for user requests and responses.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from rentals.models.user import UserRole


class UserSummary(BaseModel):
    """Owner or reporter embedded in other resources."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None


class PublicProfile(BaseModel):
    id: str
    name: Optional[str] = None
    image: Optional[str] = None


class UserResponse(BaseModel):
    """Schema for user response data."""

    id: str = Field(..., description="User's unique identifier")
    email: EmailStr = Field(..., description="User's email address")
    name: Optional[str] = Field(None, description="Display name")
    image: Optional[str] = Field(None, description="Avatar URL")
    role: UserRole = Field(..., description="User's role")
    is_active: bool = Field(..., description="Whether user account is active")
    email_verified_at: Optional[datetime] = Field(None, description="When the email was verified")
    has_password: bool = Field(..., description="Whether the account can use credential login")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """
    Profile changes for the current user.
    Changing the password requires the current password.
    """

    name: Optional[str] = Field(None, max_length=255, examples=["Jane Doe"])
    email: Optional[EmailStr] = Field(None, examples=["jane@example.com"])
    image: Optional[str] = Field(None, max_length=1024)
    current_password: Optional[str] = Field(None, max_length=128)
    new_password: Optional[str] = Field(None, min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip() if v else v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip() if v else v


class RoleUpdate(BaseModel):
    role: str = Field(..., description="USER or ADMIN", examples=["ADMIN"])
