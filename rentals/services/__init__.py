"""
Service layer for business logic.
"""

from rentals.services.auth import AuthService
from rentals.services.listing import ListingService
from rentals.services.favorite import FavoriteService
from rentals.services.report import ReportService
from rentals.services.notification import NotificationService
from rentals.services.admin import AdminService
from rentals.services.user import UserService
from rentals.services.upload import UploadService
from rentals.services.oauth import GoogleOAuthService

__all__ = [
    "AuthService",
    "ListingService",
    "FavoriteService",
    "ReportService",
    "NotificationService",
    "AdminService",
    "UserService",
    "UploadService",
    "GoogleOAuthService",
]
