"""
Pydantic schemas for authentication requests and responses.
Handles sign-up, login, OAuth, token refresh and password reset payloads.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from rentals.schemas.user import UserResponse


class RegisterRequest(BaseModel):
    """Sign-up request schema."""

    email: EmailStr = Field(..., description="User's email address", examples=["renter@example.com"])
    name: str = Field(..., min_length=1, max_length=255, description="Display name", examples=["Jane Doe"])
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User's password (minimum 8 characters)",
        examples=["securepassword123"]
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(..., description="User's email address", examples=["renter@example.com"])
    password: str = Field(..., min_length=1, max_length=128, description="User's password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class GoogleLoginRequest(BaseModel):
    id_token: str = Field(..., min_length=1, description="Google ID token obtained by the client")


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="Valid refresh token")


class AccessTokenResponse(BaseModel):
    access_token: str = Field(..., description="New JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration time in seconds")


class LoginResponse(BaseModel):
    """Login response with user info and tokens."""

    user: UserResponse = Field(..., description="Authenticated user information")
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration time in seconds")


class ForgotPasswordRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address")


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Token from the reset email")
    password: str = Field(..., min_length=8, max_length=128, description="New password")


class MessageResponse(BaseModel):
    success: bool = True
    message: str
