"""
FastAPI dependency injection utilities for authentication, settings and services.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from rentals.config import Settings, get_settings
from rentals.database import get_db
from rentals.models.user import User, UserRole
from rentals.services.admin import AdminService
from rentals.services.auth import AuthService
from rentals.services.favorite import FavoriteService
from rentals.services.listing import ListingService
from rentals.services.notification import NotificationService
from rentals.services.oauth import GoogleOAuthService
from rentals.services.report import ReportService
from rentals.services.upload import UploadService
from rentals.services.user import UserService
from rentals.utils.exceptions import (
    AuthenticationError,
    InactiveUserError
)
from rentals.utils.permissions import enforce


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> AuthService:
    return AuthService(db, settings)


async def get_listing_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> ListingService:
    return ListingService(db, settings)


async def get_favorite_service(db: AsyncSession = Depends(get_db)) -> FavoriteService:
    return FavoriteService(db)


async def get_report_service(db: AsyncSession = Depends(get_db)) -> ReportService:
    return ReportService(db)


async def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


async def get_admin_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> AdminService:
    return AdminService(db, settings)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_upload_service(settings: Settings = Depends(get_settings)) -> UploadService:
    return UploadService(settings)


def get_google_oauth_service(settings: Settings = Depends(get_settings)) -> GoogleOAuthService:
    return GoogleOAuthService(settings)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        AuthenticationError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise AuthenticationError("Authentication token required")

    # Token errors become 401 in the service; storage errors reach the global handler
    return await auth_service.get_current_user(credentials.credentials)


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        raise InactiveUserError()

    return current_user


async def get_current_admin_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    """
    Get current user with admin role.

    Raises:
        AuthorizationError: If user is not an admin
    """
    return enforce(current_user, required_role=UserRole.ADMIN, action="access admin resources")

