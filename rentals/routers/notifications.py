"""
Notification API endpoints for the signed-in user.
"""

from fastapi import APIRouter, Depends, status, Path
from typing import List
from uuid import UUID

from rentals.models.user import User
from rentals.services.notification import NotificationService
from rentals.services.error_handler import error_responses
from rentals.schemas.notification import NotificationResponse, NotificationUpdate, MarkAllReadResponse
from rentals.utils.dependencies import get_current_active_user, get_notification_service


router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=List[NotificationResponse],
    status_code=status.HTTP_200_OK,
    summary="List notifications",
    description="The caller's notifications, newest first",
    responses=error_responses(401)
)
async def list_notifications(
    current_user: User = Depends(get_current_active_user),
    notification_service: NotificationService = Depends(get_notification_service)
) -> List[NotificationResponse]:
    notifications = await notification_service.list_notifications(current_user)
    return [NotificationResponse.model_validate(n.to_dict()) for n in notifications]


@router.patch(
    "/{notification_id}",
    response_model=NotificationResponse,
    status_code=status.HTTP_200_OK,
    summary="Mark a notification",
    description="Set the read flag on one of the caller's notifications",
    responses=error_responses(401, 403, 404)
)
async def update_notification(
    update: NotificationUpdate,
    notification_id: UUID = Path(..., description="Notification ID"),
    current_user: User = Depends(get_current_active_user),
    notification_service: NotificationService = Depends(get_notification_service)
) -> NotificationResponse:
    notification = await notification_service.set_read(notification_id, current_user, read=update.read)
    return NotificationResponse.model_validate(notification.to_dict())


@router.post(
    "/read-all",
    response_model=MarkAllReadResponse,
    status_code=status.HTTP_200_OK,
    summary="Mark all notifications read",
    responses=error_responses(401)
)
async def mark_all_read(
    current_user: User = Depends(get_current_active_user),
    notification_service: NotificationService = Depends(get_notification_service)
) -> MarkAllReadResponse:
    updated = await notification_service.mark_all_read(current_user)
    return MarkAllReadResponse(success=True, updated=updated)
