"""
Listing repository with search filters and the favorites association.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import String, select, func, and_, or_, delete, insert
from sqlalchemy.exc import IntegrityError
from rentals.repositories.base import BaseRepository
from rentals.models.listing import Listing, ListingStatus, favorites
from typing import Optional, List, Tuple
from decimal import Decimal
import json
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingSearchFilters:
    """Search filter parameters for listing queries."""

    def __init__(
        self,
        featured: Optional[bool] = None,
        user_id: Optional[uuid.UUID] = None,
        status: Optional[ListingStatus] = None,
        query: Optional[str] = None,
        location: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        bedrooms: Optional[int] = None,
        bathrooms: Optional[float] = None,
        property_type: Optional[str] = None,
        amenities: Optional[List[str]] = None
    ):
        self.featured = featured
        self.user_id = user_id
        self.status = status
        self.query = query.strip() if query else None
        self.location = location.strip() if location else None
        self.min_price = min_price
        self.max_price = max_price
        self.bedrooms = bedrooms
        self.bathrooms = bathrooms
        self.property_type = property_type
        self.amenities = [a for a in (amenities or []) if a]


class ListingRepository(BaseRepository[Listing]):
    """
    Repository for listing persistence and search.
    List fields arrive already encoded; this layer does not interpret them.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    def _build_filter_conditions(self, filters: ListingSearchFilters) -> list:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: Search filter parameters

        Returns:
            List of SQLAlchemy filter conditions
        """
        conditions = []

        if filters.featured is not None:
            conditions.append(Listing.featured == filters.featured)

        if filters.user_id is not None:
            conditions.append(Listing.user_id == filters.user_id)

        if filters.status is not None:
            conditions.append(Listing.status == filters.status)

        if filters.query:
            query_text = filters.query.lower()
            conditions.append(
                or_(
                    func.lower(Listing.title, type_=String).contains(query_text, autoescape=True),
                    func.lower(Listing.description, type_=String).contains(query_text, autoescape=True)
                )
            )

        if filters.location:
            conditions.append(
                func.lower(Listing.location, type_=String).contains(filters.location.lower(), autoescape=True)
            )

        if filters.min_price is not None:
            conditions.append(Listing.price >= filters.min_price)

        if filters.max_price is not None:
            conditions.append(Listing.price <= filters.max_price)

        if filters.bedrooms is not None:
            conditions.append(Listing.bedrooms >= filters.bedrooms)

        if filters.bathrooms is not None:
            conditions.append(Listing.bathrooms >= filters.bathrooms)

        if filters.property_type:
            conditions.append(func.upper(Listing.property_type) == filters.property_type.upper())

        if filters.amenities:
            # Encoded JSON holds each amenity as a quoted string
            conditions.append(
                or_(*[
                    Listing.amenities.contains(json.dumps(amenity, ensure_ascii=False), autoescape=True)
                    for amenity in filters.amenities
                ])
            )

        return conditions

    async def search(
        self,
        filters: ListingSearchFilters,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Listing], int]:
        """
        Search listings newest first.

        Returns:
            Tuple of (listings, total_count)
        """
        try:
            conditions = self._build_filter_conditions(filters)

            query = select(Listing)
            count_query = select(func.count(Listing.id))
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            query = query.order_by(Listing.created_at.desc()).offset(skip).limit(limit)

            result = await self.db.execute(query)
            listings = list(result.unique().scalars().all())

            total_result = await self.db.execute(count_query)
            total = total_result.scalar() or 0

            logger.debug(f"Listing search returned {len(listings)} of {total}")
            return listings, total
        except Exception as e:
            logger.error(f"Failed to search listings: {e}")
            raise

    async def get_by_owner(self, user_id: uuid.UUID) -> List[Listing]:
        result = await self.db.execute(
            select(Listing)
            .where(Listing.user_id == user_id)
            .order_by(Listing.created_at.desc())
        )
        return list(result.unique().scalars().all())

    # Favorites

    async def is_favorite(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> bool:
        return await self.count_favorites(user_id, listing_id) > 0

    async def add_favorite(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> bool:
        """
        Add a (user, listing) membership.

        Returns:
            True if a row was inserted, False if it was already present
        """
        if await self.is_favorite(user_id, listing_id):
            return False

        try:
            await self.db.execute(insert(favorites).values(user_id=user_id, listing_id=listing_id))
            await self.db.commit()
            logger.debug(f"User {user_id} favorited listing {listing_id}")
            return True
        except IntegrityError:
            # A concurrent request inserted the same pair first
            await self.db.rollback()
            if await self.is_favorite(user_id, listing_id):
                return False
            raise

    async def remove_favorite(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> bool:
        """
        Remove a membership; removing an absent pair is a no-op.

        Returns:
            True if a row was deleted
        """
        try:
            result = await self.db.execute(
                delete(favorites).where(
                    and_(favorites.c.user_id == user_id, favorites.c.listing_id == listing_id)
                )
            )
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to remove favorite {user_id}/{listing_id}: {e}")
            raise

    async def get_favorites(self, user_id: uuid.UUID) -> List[Listing]:
        """Listings favorited by the user, most recently favorited first."""
        result = await self.db.execute(
            select(Listing)
            .join(favorites, favorites.c.listing_id == Listing.id)
            .where(favorites.c.user_id == user_id)
            .order_by(favorites.c.created_at.desc())
        )
        return list(result.unique().scalars().all())

    async def count_favorites(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(favorites)
            .where(and_(favorites.c.user_id == user_id, favorites.c.listing_id == listing_id))
        )
        return result.scalar() or 0
