"""
Admin API endpoints for moderation and the dashboard.
Every route requires the ADMIN role.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional, List
from uuid import UUID
import math

from rentals.models.user import User
from rentals.services.admin import AdminService
from rentals.services.report import ReportService
from rentals.services.error_handler import error_responses
from rentals.schemas.admin import StatsResponse, ActivityResponse
from rentals.schemas.listing import (
    AdminListingUpdate,
    ListingResponse,
    ListingListResponse,
    ListingMutationResponse,
    SuccessResponse
)
from rentals.schemas.report import ReportResponse, ReportStatusUpdate
from rentals.schemas.user import UserResponse, RoleUpdate
from rentals.utils.dependencies import (
    get_current_admin_user,
    get_admin_service,
    get_report_service
)


router = APIRouter(prefix="/admin", tags=["Admin"])


# Listings

@router.get(
    "/listings",
    response_model=ListingListResponse,
    status_code=status.HTTP_200_OK,
    summary="List all listings",
    description="Every listing regardless of status, optionally filtered by status",
    responses=error_responses(400, 401, 403)
)
async def list_listings(
    listing_status: Optional[str] = Query(None, alias="status", description="Listing status"),
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    page_size: int = Query(50, ge=1, le=100, description="Number of listings per page"),
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> ListingListResponse:
    listings, total_count = await admin_service.list_listings(
        current_user, status=listing_status, page=page, page_size=page_size
    )

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
    "/listings/{listing_id}",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Get listing",
    responses=error_responses(401, 403, 404)
)
async def get_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> ListingResponse:
    listing = await admin_service.get_listing(listing_id, current_user)
    return ListingResponse.model_validate(listing.to_dict())


@router.patch(
    "/listings/{listing_id}",
    response_model=ListingMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Moderate listing",
    description="Set status (ACTIVE, INACTIVE, PENDING) and/or the featured flag. The owner is notified.",
    responses=error_responses(400, 401, 403, 404)
)
async def moderate_listing(
    update: AdminListingUpdate,
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> ListingMutationResponse:
    listing = await admin_service.moderate_listing(listing_id, update, current_user)
    return ListingMutationResponse(
        success=True,
        message="Listing updated successfully",
        listing=ListingResponse.model_validate(listing.to_dict())
    )


@router.delete(
    "/listings/{listing_id}",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete listing",
    responses=error_responses(401, 403, 404)
)
async def delete_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> SuccessResponse:
    await admin_service.delete_listing(listing_id, current_user)
    return SuccessResponse(success=True)


# Reports

@router.get(
    "/reports",
    response_model=List[ReportResponse],
    status_code=status.HTTP_200_OK,
    summary="List reports",
    description="Reports newest first, optionally filtered by type and status",
    responses=error_responses(400, 401, 403)
)
async def list_reports(
    report_type: Optional[str] = Query(None, alias="type", description="LISTING or USER"),
    report_status: Optional[str] = Query(None, alias="status", description="PENDING, RESOLVED or REJECTED"),
    current_user: User = Depends(get_current_admin_user),
    report_service: ReportService = Depends(get_report_service)
) -> List[ReportResponse]:
    reports = await report_service.list_reports(current_user, report_type=report_type, status=report_status)
    return [ReportResponse.model_validate(report.to_dict()) for report in reports]


@router.get(
    "/reports/{report_id}",
    response_model=ReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Get report",
    responses=error_responses(401, 403, 404)
)
async def get_report(
    report_id: UUID = Path(..., description="Report ID"),
    current_user: User = Depends(get_current_admin_user),
    report_service: ReportService = Depends(get_report_service)
) -> ReportResponse:
    report = await report_service.get_report(report_id, current_user)
    return ReportResponse.model_validate(report.to_dict())


@router.patch(
    "/reports/{report_id}",
    response_model=ReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Update report status",
    description="Resolve or reject a report. The reporter is notified.",
    responses=error_responses(400, 401, 403, 404)
)
async def update_report_status(
    update: ReportStatusUpdate,
    report_id: UUID = Path(..., description="Report ID"),
    current_user: User = Depends(get_current_admin_user),
    report_service: ReportService = Depends(get_report_service)
) -> ReportResponse:
    report = await report_service.update_status(report_id, update.status, current_user)
    return ReportResponse.model_validate(report.to_dict())


@router.delete(
    "/reports/{report_id}",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete report",
    responses=error_responses(401, 403, 404)
)
async def delete_report(
    report_id: UUID = Path(..., description="Report ID"),
    current_user: User = Depends(get_current_admin_user),
    report_service: ReportService = Depends(get_report_service)
) -> SuccessResponse:
    await report_service.delete_report(report_id, current_user)
    return SuccessResponse(success=True)


# Users

@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Change user role",
    responses=error_responses(400, 401, 403, 404)
)
async def update_user_role(
    update: RoleUpdate,
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> UserResponse:
    user = await admin_service.update_user_role(user_id, update.role, current_user)
    return UserResponse.model_validate(user.to_dict())


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Delete a user and everything they own. Admins cannot delete themselves.",
    responses=error_responses(400, 401, 403, 404)
)
async def delete_user(
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> None:
    await admin_service.delete_user(user_id, current_user)


# Dashboard

@router.get(
    "/stats",
    response_model=StatsResponse,
    status_code=status.HTTP_200_OK,
    summary="Dashboard statistics",
    responses=error_responses(401, 403)
)
async def get_stats(
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> StatsResponse:
    return StatsResponse(**await admin_service.get_stats(current_user))


@router.get(
    "/activity",
    response_model=List[ActivityResponse],
    status_code=status.HTTP_200_OK,
    summary="Recent activity",
    description="The most recent audit events, newest first",
    responses=error_responses(401, 403)
)
async def recent_activity(
    limit: int = Query(10, ge=1, le=100, description="Number of events"),
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> List[ActivityResponse]:
    activities = await admin_service.recent_activity(current_user, limit=limit)
    return [ActivityResponse.model_validate(activity.to_dict()) for activity in activities]
