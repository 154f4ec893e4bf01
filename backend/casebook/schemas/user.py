"""
User Schemas Module
===================

Pydantic models for user-related request/response validation.
Password hashes never appear in any response schema.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from casebook.models.role_enum import Role


class UserUpdate(BaseModel):
    """Administrative update of an account."""

    name: Optional[str] = Field(default=None, max_length=255, description="Display name")
    role: Optional[Role] = Field(default=None, description="New role")
    is_active: Optional[bool] = Field(default=None, description="Account active status")


class UserResponse(BaseModel):
    """User response schema (excludes sensitive data)."""

    id: UUID
    email: str
    name: Optional[str] = None
    role: Role
    is_active: bool
    is_locked: bool
    journalist_profile_id: Optional[UUID] = None
    created_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "email": "reporter@example.org",
                "name": "A. Reporter",
                "role": "JOURNALIST",
                "is_active": True,
                "is_locked": False,
                "journalist_profile_id": "550e8400-e29b-41d4-a716-446655440001",
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class CurrentUserResponse(BaseModel):
    """
    Current authenticated user response.

    Carries the role and journalist profile id the frontend needs to
    decide which actions to offer.
    """

    id: UUID
    email: str
    name: Optional[str] = None
    role: Role
    is_active: bool
    journalist_profile_id: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)


class AccountUnlockResponse(BaseModel):
    message: str = Field(default="Account unlocked successfully")
    user_id: str
