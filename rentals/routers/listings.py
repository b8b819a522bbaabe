"""
Listing API endpoints for CRUD operations, search and filtering.
Reads are public; writes require an owner or an admin.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional, List
from decimal import Decimal
from uuid import UUID
import math

from rentals.models.listing import ListingStatus
from rentals.models.user import User
from rentals.repositories.listing import ListingSearchFilters
from rentals.services.listing import ListingService
from rentals.services.error_handler import error_responses
from rentals.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingListResponse,
    ListingMutationResponse,
    SuccessResponse
)
from rentals.utils import list_codec
from rentals.utils.dependencies import get_current_active_user, get_listing_service
from rentals.utils.exceptions import ValidationError


router = APIRouter(prefix="/listings", tags=["Listings"])


def _parse_status(value: Optional[str]) -> Optional[ListingStatus]:
    if not value:
        return None
    try:
        return ListingStatus(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid listing status: {value}")


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new listing",
    description="Create a listing owned by the caller. Only admins can set it featured.",
    responses=error_responses(400, 401)
)
async def create_listing(
    listing_data: ListingCreate,
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    listing = await listing_service.create_listing(listing_data, current_user)
    return ListingResponse.model_validate(listing.to_dict())


@router.get(
    "",
    response_model=ListingListResponse,
    status_code=status.HTTP_200_OK,
    summary="List listings with search and filtering",
    description="Get a paginated list of listings, newest first",
    responses=error_responses(400)
)
async def list_listings(
    # Search parameters
    query: Optional[str] = Query(None, description="Search text for title and description"),
    location: Optional[str] = Query(None, description="Location substring"),

    # Price filters
    min_price: Optional[Decimal] = Query(None, ge=0, description="Minimum monthly rent"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Maximum monthly rent"),

    # Unit filters
    bedrooms: Optional[int] = Query(None, ge=0, le=50, description="Minimum number of bedrooms"),
    bathrooms: Optional[float] = Query(None, ge=0, le=50, description="Minimum number of bathrooms"),
    property_type: Optional[str] = Query(None, description="Property type, e.g. CONDO"),
    amenities: Optional[List[str]] = Query(None, description="Amenities; any match qualifies"),

    featured: Optional[bool] = Query(None, description="Only featured or non-featured listings"),
    listing_status: Optional[str] = Query(None, alias="status", description="Listing status"),
    user_id: Optional[UUID] = Query(None, description="Owner id"),

    # Pagination
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    page_size: int = Query(20, ge=1, le=100, description="Number of listings per page"),

    listing_service: ListingService = Depends(get_listing_service)
) -> ListingListResponse:
    amenity_values = []
    for value in amenities or []:
        amenity_values.extend(list_codec.split_commas(value))

    search_filters = ListingSearchFilters(
        featured=featured,
        user_id=user_id,
        status=_parse_status(listing_status),
        query=query,
        location=location,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        property_type=property_type,
        amenities=amenity_values
    )

    listings, total_count = await listing_service.list_listings(search_filters, page=page, page_size=page_size)

    total_pages = math.ceil(total_count / page_size) if total_count > 0 else 1

    return ListingListResponse(
        items=[ListingResponse.model_validate(listing.to_dict()) for listing in listings],
        total=total_count,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1
    )


@router.get(
    "/user/{user_id}",
    response_model=List[ListingResponse],
    status_code=status.HTTP_200_OK,
    summary="Get a user's listings",
    description="Listings owned by a user. Visible to that user and to admins.",
    responses=error_responses(401, 403)
)
async def get_user_listings(
    user_id: UUID = Path(..., description="Owner id"),
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> List[ListingResponse]:
    listings = await listing_service.get_user_listings(user_id, current_user)
    return [ListingResponse.model_validate(listing.to_dict()) for listing in listings]


@router.get(
    "/{listing_id}",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Get listing by ID",
    description="Get a listing with its owner summary",
    responses=error_responses(404)
)
async def get_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    listing = await listing_service.get_listing(listing_id)
    return ListingResponse.model_validate(listing.to_dict())


@router.patch(
    "/{listing_id}",
    response_model=ListingMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Update listing",
    description="Update the fields present in the body. Owner or admin only.",
    responses=error_responses(400, 401, 403, 404)
)
async def update_listing(
    listing_data: ListingUpdate,
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingMutationResponse:
    listing = await listing_service.update_listing(listing_id, listing_data, current_user)
    return ListingMutationResponse(
        success=True,
        message="Listing updated successfully",
        listing=ListingResponse.model_validate(listing.to_dict())
    )


@router.delete(
    "/{listing_id}",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete listing",
    description="Delete a listing. Owner or admin only.",
    responses=error_responses(401, 403, 404)
)
async def delete_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> SuccessResponse:
    await listing_service.delete_listing(listing_id, current_user)
    return SuccessResponse(success=True)
