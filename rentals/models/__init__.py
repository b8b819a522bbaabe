"""
Database models for the rental marketplace.
"""

from rentals.models.user import User, UserRole
from rentals.models.listing import Listing, ListingStatus, favorites
from rentals.models.report import Report, ReportType, ReportStatus
from rentals.models.notification import Notification
from rentals.models.password_reset import PasswordReset
from rentals.models.activity import Activity, ActivityType

__all__ = [
    "User",
    "UserRole",
    "Listing",
    "ListingStatus",
    "favorites",
    "Report",
    "ReportType",
    "ReportStatus",
    "Notification",
    "PasswordReset",
    "Activity",
    "ActivityType",
]
