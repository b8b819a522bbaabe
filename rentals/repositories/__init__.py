"""
Repository layer for data access operations.
"""

from rentals.repositories.base import BaseRepository
from rentals.repositories.user import UserRepository
from rentals.repositories.listing import ListingRepository, ListingSearchFilters
from rentals.repositories.report import ReportRepository
from rentals.repositories.notification import NotificationRepository
from rentals.repositories.password_reset import PasswordResetRepository
from rentals.repositories.activity import ActivityRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ListingRepository",
    "ListingSearchFilters",
    "ReportRepository",
    "NotificationRepository",
    "PasswordResetRepository",
    "ActivityRepository",
]
