"""
Favorites API endpoints: the caller's saved listings.
"""

from fastapi import APIRouter, Depends, status, Path
from typing import List
from uuid import UUID

from rentals.models.user import User
from rentals.services.favorite import FavoriteService
from rentals.services.error_handler import error_responses
from rentals.schemas.listing import ListingResponse, SuccessResponse
from rentals.utils.dependencies import get_current_active_user, get_favorite_service


router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.get(
    "",
    response_model=List[ListingResponse],
    status_code=status.HTTP_200_OK,
    summary="List favorites",
    description="Listings the caller has favorited, most recently added first",
    responses=error_responses(401)
)
async def list_favorites(
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> List[ListingResponse]:
    listings = await favorite_service.list_favorites(current_user)
    return [ListingResponse.model_validate(listing.to_dict()) for listing in listings]


@router.post(
    "/{listing_id}",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Favorite a listing",
    description="Idempotent; favoriting twice keeps a single entry",
    responses=error_responses(401, 404)
)
async def add_favorite(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> SuccessResponse:
    await favorite_service.add_favorite(listing_id, current_user)
    return SuccessResponse(success=True)


@router.delete(
    "/{listing_id}",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Unfavorite a listing",
    description="Idempotent; removing a listing that is not a favorite succeeds",
    responses=error_responses(401)
)
async def remove_favorite(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> SuccessResponse:
    await favorite_service.remove_favorite(listing_id, current_user)
    return SuccessResponse(success=True)
