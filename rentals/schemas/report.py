"""
Pydantic schemas for reports and moderation.
Type and status arrive as plain strings and are checked by the report service.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from rentals.models.report import ReportType, ReportStatus
from rentals.schemas.user import UserSummary
from rentals.schemas.listing import ListingResponse


class ReportCreate(BaseModel):
    type: Optional[str] = Field(None, description="LISTING or USER", examples=["LISTING"])
    target_id: Optional[str] = Field(None, description="Id of the reported listing or user")
    reason: Optional[str] = Field(None, max_length=255, examples=["Scam"])
    description: Optional[str] = Field(None, max_length=5000)


class ReportStatusUpdate(BaseModel):
    status: Optional[str] = Field(None, description="PENDING, RESOLVED or REJECTED")


class ReportResponse(BaseModel):
    id: str
    type: ReportType
    target_id: str
    reason: str
    description: Optional[str] = None
    status: ReportStatus
    reporter_id: str
    listing_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    reporter: Optional[UserSummary] = None
    listing: Optional[ListingResponse] = None


class ReportCreatedResponse(BaseModel):
    success: bool = True
    message: str
    report_id: str
