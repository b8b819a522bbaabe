"""
Pydantic schemas for image upload.
"""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    secure_url: str = Field(..., description="HTTPS URL of the hosted image")
