"""
Pydantic schemas for the admin dashboard.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict
from datetime import datetime


class StatsResponse(BaseModel):
    total_users: int = Field(..., description="Registered accounts")
    total_listings: int
    total_reports: int
    active_listings: int = Field(..., description="Listings in ACTIVE status")


class ActivityResponse(BaseModel):
    id: str
    type: str
    description: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
