"""
Admin moderation: listing status and featured flag, user roles and removal,
dashboard statistics and the recent activity feed.
"""

from typing import List, Optional, Tuple, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from rentals.config import Settings, get_settings
from rentals.models.activity import Activity, ActivityType
from rentals.models.listing import Listing, ListingStatus, MODERATION_STATUSES
from rentals.models.user import User, UserRole
from rentals.repositories.listing import ListingRepository, ListingSearchFilters
from rentals.repositories.report import ReportRepository
from rentals.repositories.user import UserRepository
from rentals.schemas.listing import AdminListingUpdate
from rentals.services.activity import ActivityService
from rentals.services.listing import ListingService
from rentals.services.notification import NotificationService
from rentals.utils.exceptions import ValidationError, NotFoundError
from rentals.utils.permissions import enforce
import uuid
import logging

logger = logging.getLogger(__name__)


class AdminService:
    """
    Operations reserved for ADMIN principals. Every method enforces the role itself.
    """

    def __init__(self, db_session: AsyncSession, settings: Optional[Settings] = None):
        self.db = db_session
        self.settings = settings or get_settings()
        self.user_repo = UserRepository(db_session)
        self.listing_repo = ListingRepository(db_session)
        self.report_repo = ReportRepository(db_session)
        self.listings = ListingService(db_session, self.settings)
        self.notifications = NotificationService(db_session)
        self.activity = ActivityService(db_session)

    def _require_admin(self, current_user: Optional[User], action: str) -> User:
        return enforce(current_user, required_role=UserRole.ADMIN, action=action)

    # Listings

    async def list_listings(
        self,
        current_user: Optional[User],
        status: Optional[str] = None,
        page: int = 1,
        page_size: int = 50
    ) -> Tuple[List[Listing], int]:
        self._require_admin(current_user, "moderate listings")

        status_filter = None
        if status:
            try:
                status_filter = ListingStatus(status.upper())
            except ValueError:
                raise ValidationError(f"Invalid listing status: {status}")

        return await self.listings.list_listings(
            ListingSearchFilters(status=status_filter), page=page, page_size=page_size
        )

    async def get_listing(self, listing_id: uuid.UUID, current_user: Optional[User]) -> Listing:
        self._require_admin(current_user, "moderate listings")
        return await self.listings.get_listing(listing_id)

    async def moderate_listing(
        self,
        listing_id: uuid.UUID,
        update: AdminListingUpdate,
        current_user: Optional[User]
    ) -> Listing:
        """
        Set a listing's moderation status and/or featured flag and tell the owner.

        Raises:
            ValidationError: If the status is not ACTIVE, INACTIVE or PENDING, or nothing is given
            NotFoundError: If the listing does not exist
        """
        self._require_admin(current_user, "moderate listings")

        changes = {}
        if update.status is not None:
            try:
                status = ListingStatus(update.status.strip().upper())
            except ValueError:
                status = None
            if status not in MODERATION_STATUSES:
                raise ValidationError("Invalid status. Must be ACTIVE, INACTIVE or PENDING")
            changes["status"] = status

        if update.featured is not None:
            changes["featured"] = update.featured

        if not changes:
            raise ValidationError("Provide a status or featured value to update")

        listing = await self.listings.get_listing(listing_id)
        previous_status, previous_featured = listing.status, listing.featured

        listing = await self.listing_repo.update(listing, changes)
        logger.info(f"Admin {current_user.id} moderated listing {listing_id}: {changes}")

        messages = []
        if "status" in changes and listing.status != previous_status:
            messages.append(f"status changed to {listing.status.value}")
        if "featured" in changes and listing.featured != previous_featured:
            messages.append("is now featured" if listing.featured else "is no longer featured")

        if messages:
            await self.notifications.notify(
                listing.user_id,
                "Listing updated by moderator",
                f"Your listing '{listing.title}' " + " and ".join(messages) + ".",
            )

        await self.activity.log(
            ActivityType.LISTING_UPDATED,
            f"Listing '{listing.title}' moderated",
            {
                "listing_id": str(listing.id),
                "admin_id": str(current_user.id),
                "status": listing.status.value,
                "featured": listing.featured,
            },
        )
        return listing

    async def delete_listing(self, listing_id: uuid.UUID, current_user: Optional[User]) -> None:
        self._require_admin(current_user, "moderate listings")
        await self.listings.delete_listing(listing_id, current_user)

    # Users

    async def update_user_role(self, user_id: uuid.UUID, role: str, current_user: Optional[User]) -> User:
        """
        Change a user's role.

        Raises:
            ValidationError: If the role is not USER or ADMIN
            NotFoundError: If the user does not exist
        """
        self._require_admin(current_user, "manage users")

        try:
            new_role = UserRole((role or "").strip().upper())
        except ValueError:
            raise ValidationError("Invalid role. Must be USER or ADMIN")

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))

        user = await self.user_repo.update(user, {"role": new_role})
        logger.info(f"Admin {current_user.id} set role of user {user_id} to {new_role.value}")

        await self.activity.log(
            ActivityType.USER_UPDATED,
            f"User {user.email} role changed to {new_role.value}",
            {"user_id": str(user.id), "role": new_role.value, "admin_id": str(current_user.id)},
        )
        return user

    async def delete_user(self, user_id: uuid.UUID, current_user: Optional[User]) -> None:
        """
        Delete a user and everything they own.

        Raises:
            ValidationError: If an admin tries to delete their own account
            NotFoundError: If the user does not exist
        """
        self._require_admin(current_user, "manage users")

        if user_id == current_user.id:
            raise ValidationError("Cannot delete your own account")

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))

        email = user.email
        await self.user_repo.delete(user)
        logger.info(f"Admin {current_user.id} deleted user {user_id}")

        await self.activity.log(
            ActivityType.USER_DELETED,
            f"User {email} deleted",
            {"user_id": str(user_id), "admin_id": str(current_user.id)},
        )

    # Dashboard

    async def get_stats(self, current_user: Optional[User]) -> Dict[str, int]:
        self._require_admin(current_user, "view statistics")

        return {
            "total_users": await self.user_repo.count(),
            "total_listings": await self.listing_repo.count(),
            "total_reports": await self.report_repo.count(),
            "active_listings": await self.listing_repo.count({"status": ListingStatus.ACTIVE}),
        }

    async def recent_activity(self, current_user: Optional[User], limit: int = 10) -> List[Activity]:
        self._require_admin(current_user, "view activity")
        return await self.activity.recent(limit=limit)
