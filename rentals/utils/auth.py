"""
Authentication utilities for JWT token management and password reset tokens.
Provides JWT token generation, validation, and role-based claims.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from rentals.config import settings
from rentals.models.user import UserRole
import secrets
import uuid


class TokenPayload:
    """JWT token payload structure."""

    def __init__(self, user_id: str, email: str, role: Optional[str], exp: datetime):
        self.user_id = user_id
        self.email = email
        self.role = role
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        return cls(
            user_id=data["sub"],
            email=data["email"],
            role=data.get("role"),  # Role is optional for refresh tokens
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: UserRole,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create JWT access token with user claims.

    Args:
        user_id: User's UUID
        email: User's email address
        role: User's role (USER/ADMIN)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    issued_at = _now()
    expire = issued_at + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "role": role.value,
        "exp": expire,
        "iat": issued_at,
        "type": "access"
    }

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT refresh token."""
    issued_at = _now()
    expire = issued_at + (expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days))

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "exp": expire,
        "iat": issued_at,
        "type": "refresh"
    }

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = "access") -> TokenPayload:
    """
    Verify and decode JWT token.

    Args:
        token: JWT token string
        token_type: Expected token type ("access" or "refresh")

    Returns:
        TokenPayload if valid

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        # jose rejects expired tokens with ExpiredSignatureError, a JWTError subclass
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )

        if payload.get("type") != token_type:
            raise JWTError(f"Invalid token type. Expected {token_type}")

        if not payload.get("sub") or not payload.get("email"):
            raise JWTError("Invalid token payload")

        return TokenPayload.from_dict(payload)

    except JWTError:
        raise
    except Exception as e:
        raise JWTError(f"Token validation error: {str(e)}")


def generate_reset_token() -> str:
    """64 hex characters from 32 random bytes."""
    return secrets.token_hex(32)
