"""
Notification Schemas Module
===========================
"""

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from casebook.core.enums import EmailFrequency, NotificationPriority, NotificationType


class NotificationCreate(BaseModel):
    """Staff-authored notification for a single user."""

    user_id: UUID
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=500)
    message: str = Field(..., min_length=1)
    data: Optional[dict[str, Any]] = None
    priority: NotificationPriority = NotificationPriority.MEDIUM
    entity_id: Optional[str] = Field(default=None, max_length=64)
    entity_type: Optional[str] = Field(default=None, max_length=50)


class EmailSubscriptionRequest(BaseModel):
    email: EmailStr
    preferences: Optional[dict[str, Any]] = None
    frequency: EmailFrequency = EmailFrequency.DAILY


class EmailSubscriptionStatus(BaseModel):
    subscribed: bool
    email: str
    preferences: dict[str, Any] = Field(default_factory=dict)
    frequency: EmailFrequency
    is_active: bool
