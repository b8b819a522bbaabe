"""
Report API endpoints. Any signed-in user may file a report; listing them is for admins.
"""

from fastapi import APIRouter, Depends, status, Query
from typing import Optional, List

from rentals.models.user import User
from rentals.services.report import ReportService
from rentals.services.error_handler import error_responses
from rentals.schemas.report import ReportCreate, ReportResponse, ReportCreatedResponse
from rentals.utils.dependencies import get_current_active_user, get_report_service


router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post(
    "",
    response_model=ReportCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="File a report",
    description="Report a listing or a user for moderation",
    responses=error_responses(400, 401, 404)
)
async def create_report(
    report_data: ReportCreate,
    current_user: User = Depends(get_current_active_user),
    report_service: ReportService = Depends(get_report_service)
) -> ReportCreatedResponse:
    report = await report_service.create_report(report_data, current_user)
    return ReportCreatedResponse(
        success=True,
        message="Report submitted successfully",
        report_id=str(report.id)
    )


@router.get(
    "",
    response_model=List[ReportResponse],
    status_code=status.HTTP_200_OK,
    summary="List reports",
    description="Admin only. Filter by type (LISTING, USER) and status (PENDING, RESOLVED, REJECTED).",
    responses=error_responses(400, 401, 403)
)
async def list_reports(
    report_type: Optional[str] = Query(None, alias="type", description="LISTING or USER"),
    report_status: Optional[str] = Query(None, alias="status", description="PENDING, RESOLVED or REJECTED"),
    current_user: User = Depends(get_current_active_user),
    report_service: ReportService = Depends(get_report_service)
) -> List[ReportResponse]:
    reports = await report_service.list_reports(current_user, report_type=report_type, status=report_status)
    return [ReportResponse.model_validate(report.to_dict()) for report in reports]
