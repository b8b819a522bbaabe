"""
Image upload to Cloudinary.
The SDK is synchronous, so uploads run in Starlette's threadpool.
"""

from typing import Optional
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool
from rentals.config import Settings, get_settings
from rentals.utils.exceptions import ValidationError, UploadError
import cloudinary
import cloudinary.uploader
import cloudinary.exceptions
import logging

logger = logging.getLogger(__name__)


class UploadService:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _upload_bytes(self, raw: bytes, filename: Optional[str]) -> dict:
        return cloudinary.uploader.upload(
            raw,
            folder=self.settings.cloudinary_folder,
            resource_type="image",
            filename=filename or None,
            cloud_name=self.settings.cloudinary_cloud_name,
            api_key=self.settings.cloudinary_api_key,
            api_secret=self.settings.cloudinary_api_secret,
            secure=True,
        )

    async def upload_image(self, file: Optional[UploadFile]) -> str:
        """
        Upload an image and return its HTTPS URL.

        Raises:
            UploadError: If Cloudinary is not configured or rejects the upload
            ValidationError: If no file, an empty file, a non-image or an oversized file is sent
        """
        if not self.settings.cloudinary_configured:
            logger.error("Upload attempted but Cloudinary credentials are missing")
            raise UploadError("Image upload is not configured")

        if file is None:
            raise ValidationError("No file provided")

        content_type = (file.content_type or "").lower()
        if content_type and not content_type.startswith("image/"):
            raise ValidationError(f"Unsupported file type '{content_type}'. Only images are accepted")

        raw = await file.read()
        if not raw:
            raise ValidationError("Uploaded file is empty")
        if len(raw) > self.settings.max_file_size:
            raise ValidationError(
                f"File size {len(raw)} bytes exceeds maximum allowed size {self.settings.max_file_size} bytes"
            )

        try:
            result = await run_in_threadpool(self._upload_bytes, raw, file.filename)
        except cloudinary.exceptions.Error as e:
            logger.error(f"Cloudinary upload failed for {file.filename!r}: {e}")
            raise UploadError(f"Failed to upload image: {str(e)[:200]}")

        secure_url = result.get("secure_url")
        if not secure_url:
            logger.error(f"Cloudinary response for {file.filename!r} had no secure_url")
            raise UploadError("Image host returned no URL")

        logger.info(f"Uploaded {file.filename!r} to {secure_url}")
        return secure_url
