"""
Image upload endpoint backed by Cloudinary.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from typing import Optional

from rentals.models.user import User
from rentals.services.upload import UploadService
from rentals.services.error_handler import error_responses
from rentals.schemas.upload import UploadResponse
from rentals.utils.dependencies import get_current_active_user, get_upload_service


router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload an image",
    description="Upload a listing image (multipart field `file`) and get its HTTPS URL",
    responses=error_responses(400, 401, 500)
)
async def upload_image(
    file: Optional[UploadFile] = File(None, description="Image file to upload"),
    current_user: User = Depends(get_current_active_user),
    upload_service: UploadService = Depends(get_upload_service)
) -> UploadResponse:
    secure_url = await upload_service.upload_image(file)
    return UploadResponse(secure_url=secure_url)
