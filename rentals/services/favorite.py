"""
Favorites toggle: idempotent add and remove of (user, listing) pairs.
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from rentals.models.listing import Listing
from rentals.models.user import User
from rentals.repositories.listing import ListingRepository
from rentals.utils.exceptions import NotFoundError
from rentals.utils.permissions import enforce
import uuid
import logging

logger = logging.getLogger(__name__)


class FavoriteService:
    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)

    async def list_favorites(self, current_user: Optional[User]) -> List[Listing]:
        enforce(current_user)
        return await self.listing_repo.get_favorites(current_user.id)

    async def add_favorite(self, listing_id: uuid.UUID, current_user: Optional[User]) -> bool:
        """
        Favorite a listing. Adding an existing favorite changes nothing.

        Returns:
            True if the pair was newly added

        Raises:
            AuthenticationError: If there is no authenticated user
            NotFoundError: If the listing does not exist
        """
        enforce(current_user)

        if not await self.listing_repo.exists(listing_id):
            raise NotFoundError("Listing", str(listing_id))

        added = await self.listing_repo.add_favorite(current_user.id, listing_id)
        if added:
            logger.info(f"User {current_user.id} favorited listing {listing_id}")
        return added

    async def remove_favorite(self, listing_id: uuid.UUID, current_user: Optional[User]) -> bool:
        """Unfavorite a listing; removing a non-member pair succeeds."""
        enforce(current_user)
        return await self.listing_repo.remove_favorite(current_user.id, listing_id)
