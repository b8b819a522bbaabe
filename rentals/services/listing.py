"""
Listing service for CRUD operations with ownership and role-based authorization.
Converts list-valued request fields through the list codec before persistence.
"""

from typing import Optional, List, Tuple, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from rentals.config import Settings, get_settings
from rentals.models.listing import Listing
from rentals.models.activity import ActivityType
from rentals.models.user import User
from rentals.repositories.listing import ListingRepository, ListingSearchFilters
from rentals.schemas.listing import ListingCreate, ListingUpdate
from rentals.services.activity import ActivityService
from rentals.utils import list_codec
from rentals.utils.exceptions import NotFoundError, AuthorizationError
from rentals.utils.permissions import enforce
import uuid
import logging

logger = logging.getLogger(__name__)

LIST_FIELDS = ("images", "amenities", "building_amenities")

# Columns that may be cleared by sending null in an update
NULLABLE_FIELDS = ("landlord_email", "landlord_phone")


class ListingService:
    """
    Service for listing lifecycle management.
    Owners manage their own listings; admins manage every listing and alone control `featured`.
    """

    def __init__(self, db_session: AsyncSession, settings: Optional[Settings] = None):
        self.db = db_session
        self.settings = settings or get_settings()
        self.listing_repo = ListingRepository(db_session)
        self.activity = ActivityService(db_session)

    def encode_list_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Encode list-valued fields present in data.

        Arrays and encoded strings are both accepted; any other value
        becomes an empty list. Images are made absolute.
        """
        encoded = dict(data)
        for field in LIST_FIELDS:
            if field not in encoded:
                continue
            values = list_codec.coerce(encoded[field])
            if field == "images":
                values = list_codec.normalize_image_urls(values, self.settings.site_origin)
            encoded[field] = list_codec.encode(values)
        return encoded

    async def get_listing(self, listing_id: uuid.UUID) -> Listing:
        """
        Get a listing by id; public.

        Raises:
            NotFoundError: If the listing does not exist
        """
        listing = await self.listing_repo.get_by_id(listing_id)
        if listing is None:
            raise NotFoundError("Listing", str(listing_id))
        return listing

    async def list_listings(
        self,
        filters: ListingSearchFilters,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Listing], int]:
        page_size = min(page_size, self.settings.max_page_size)
        skip = (page - 1) * page_size
        return await self.listing_repo.search(filters, skip=skip, limit=page_size)

    async def create_listing(self, listing_data: ListingCreate, current_user: Optional[User]) -> Listing:
        """
        Create a listing owned by the current user.

        Args:
            listing_data: Validated listing fields
            current_user: Authenticated creator

        Returns:
            Created listing with its owner loaded

        Raises:
            AuthenticationError: If there is no authenticated user
        """
        enforce(current_user, action="create listings")

        data = listing_data.model_dump()
        data = self.encode_list_fields(data)
        data["user_id"] = current_user.id
        if not current_user.is_admin:
            data["featured"] = False

        listing = await self.listing_repo.create(data)
        logger.info(f"Listing {listing.id} created by user {current_user.id}")

        await self.activity.log(
            ActivityType.LISTING_CREATED,
            f"Listing '{listing.title}' created",
            {"listing_id": str(listing.id), "user_id": str(current_user.id)},
        )
        return await self.get_listing(listing.id)

    async def update_listing(
        self,
        listing_id: uuid.UUID,
        listing_data: ListingUpdate,
        current_user: Optional[User]
    ) -> Listing:
        """
        Apply the fields present in the request to a listing.

        Raises:
            AuthenticationError: If there is no authenticated user
            NotFoundError: If the listing does not exist
            AuthorizationError: If the caller is neither owner nor admin,
                or a non-admin tries to change `featured`
        """
        enforce(current_user, action="update listings")

        listing = await self.get_listing(listing_id)
        enforce(current_user, owner_id=listing.user_id, action="update this listing")

        changes = listing_data.model_dump(exclude_unset=True)

        if changes.get("featured") is not None and not current_user.is_admin:
            raise AuthorizationError("Only administrators can change the featured flag")

        changes = {
            field: value for field, value in changes.items()
            if value is not None or field in NULLABLE_FIELDS or field in LIST_FIELDS
        }
        changes = self.encode_list_fields(changes)

        if not changes:
            return listing

        updated = await self.listing_repo.update(listing, changes)
        logger.info(f"Listing {listing_id} updated by user {current_user.id}: {sorted(changes)}")

        await self.activity.log(
            ActivityType.LISTING_UPDATED,
            f"Listing '{updated.title}' updated",
            {"listing_id": str(listing_id), "user_id": str(current_user.id), "fields": sorted(changes)},
        )
        return updated

    async def delete_listing(self, listing_id: uuid.UUID, current_user: Optional[User]) -> None:
        """
        Hard-delete a listing. Favorites go with it; reports keep a null listing reference.

        Raises:
            AuthenticationError: If there is no authenticated user
            NotFoundError: If the listing does not exist
            AuthorizationError: If the caller is neither owner nor admin
        """
        enforce(current_user, action="delete listings")

        listing = await self.get_listing(listing_id)
        enforce(current_user, owner_id=listing.user_id, action="delete this listing")

        title = listing.title
        await self.listing_repo.delete(listing)
        logger.info(f"Listing {listing_id} deleted by user {current_user.id}")

        await self.activity.log(
            ActivityType.LISTING_DELETED,
            f"Listing '{title}' deleted",
            {"listing_id": str(listing_id), "user_id": str(current_user.id)},
        )

    async def get_user_listings(self, user_id: uuid.UUID, current_user: Optional[User]) -> List[Listing]:
        """Listings of a user; visible to that user and to admins."""
        enforce(current_user, owner_id=user_id, action="view these listings")
        return await self.listing_repo.get_by_owner(user_id)
