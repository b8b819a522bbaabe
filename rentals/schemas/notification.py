"""
Pydantic schemas for notifications.
"""

from pydantic import BaseModel
from datetime import datetime


class NotificationResponse(BaseModel):
    id: str
    title: str
    description: str
    read: bool
    user_id: str
    created_at: datetime


class NotificationUpdate(BaseModel):
    read: bool = True


class MarkAllReadResponse(BaseModel):
    success: bool = True
    updated: int
