"""
User profile endpoints: the caller's own account and public profiles of others.
"""

from fastapi import APIRouter, Depends, status, Path
from uuid import UUID

from rentals.models.user import User
from rentals.services.user import UserService
from rentals.services.error_handler import error_responses
from rentals.schemas.user import UserResponse, PublicProfile, ProfileUpdate
from rentals.utils.dependencies import get_current_active_user, get_user_service


router = APIRouter(prefix="/users", tags=["Users"])


@router.patch(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Update profile",
    description="Change name, email, avatar or password. A new password needs the current one.",
    responses=error_responses(400, 401)
)
async def update_profile(
    update: ProfileUpdate,
    current_user: User = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    user = await user_service.update_profile(update, current_user)
    return UserResponse.model_validate(user.to_dict())


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete account",
    description="Delete the caller's account with its listings, favorites, reports and notifications",
    responses=error_responses(401)
)
async def delete_account(
    current_user: User = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service)
) -> None:
    await user_service.delete_account(current_user)


@router.get(
    "/{user_id}",
    response_model=PublicProfile,
    status_code=status.HTTP_200_OK,
    summary="Get public profile",
    responses=error_responses(401, 404)
)
async def get_public_profile(
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service)
) -> PublicProfile:
    user = await user_service.get_profile(user_id, current_user)
    return PublicProfile(id=str(user.id), name=user.name, image=user.image)
