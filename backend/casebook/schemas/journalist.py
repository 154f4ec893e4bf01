"""
Journalist Schemas Module
=========================

Profile updates by the journalist, publication entries, and the
administrative verification/membership change.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from casebook.core.enums import MembershipTier, VerificationStatus


class JournalistProfileUpdate(BaseModel):
    """Fields a journalist may edit on their own profile."""

    bio: Optional[str] = None
    experience: Optional[str] = None
    specialization: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)
    languages: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=512)
    social_media: Optional[str] = None


class PublicationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    outlet: Optional[str] = Field(default=None, max_length=255)
    url: Optional[str] = Field(default=None, max_length=1024)
    summary: Optional[str] = None
    published_at: Optional[datetime] = None


class JournalistAdminUpdate(BaseModel):
    """Staff-only changes: verification state, tier and mentor."""

    verification_status: Optional[VerificationStatus] = None
    membership_tier: Optional[MembershipTier] = None
    mentor_id: Optional[UUID] = None
