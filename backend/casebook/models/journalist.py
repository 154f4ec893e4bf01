"""
Journalist Models
=================

JournalistProfile extends a User with professional details, membership
tier and verification state. Profiles can be linked in a mentor/mentee
relationship. Publication records a journalist's published work.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casebook.core.enums import MembershipTier, VerificationStatus
from casebook.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, isoformat

if TYPE_CHECKING:
    from casebook.models.case import Case
    from casebook.models.user import User


class JournalistProfile(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Professional profile of a journalist account.

    Attributes:
        user_id: Owning user (one profile per user)
        membership_tier: Network membership level
        verification_status: Credential verification state
        is_verified: True once staff verified the credentials
        mentor_id: Optional mentoring profile
    """

    __tablename__ = "journalist_profiles"

    def __init__(self, **kwargs):
        kwargs.setdefault("membership_tier", MembershipTier.ASSOCIATE)
        kwargs.setdefault("verification_status", VerificationStatus.PENDING)
        kwargs.setdefault("is_verified", False)
        super().__init__(**kwargs)

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    # ==========================
    # Profile Details
    # ==========================
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    experience: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    specialization: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    languages: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    social_media: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ==========================
    # Membership & Verification
    # ==========================
    membership_tier: Mapped[MembershipTier] = mapped_column(
        SAEnum(MembershipTier, native_enum=False, length=30),
        nullable=False,
        default=MembershipTier.ASSOCIATE,
    )
    verification_status: Mapped[VerificationStatus] = mapped_column(
        SAEnum(VerificationStatus, native_enum=False, length=30),
        nullable=False,
        default=VerificationStatus.PENDING,
        index=True,
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    mentor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("journalist_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ==========================
    # Relationships
    # ==========================
    user: Mapped["User"] = relationship("User", back_populates="journalist_profile")

    mentor: Mapped[Optional["JournalistProfile"]] = relationship(
        "JournalistProfile",
        remote_side="JournalistProfile.id",
        back_populates="mentees",
    )
    mentees: Mapped[List["JournalistProfile"]] = relationship(
        "JournalistProfile",
        back_populates="mentor",
    )

    cases: Mapped[List["Case"]] = relationship("Case", back_populates="journalist")

    publications: Mapped[List["Publication"]] = relationship(
        "Publication",
        back_populates="journalist",
        cascade="all, delete-orphan",
        order_by="Publication.published_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<JournalistProfile(id={self.id}, user_id={self.user_id})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "bio": self.bio,
            "experience": self.experience,
            "specialization": self.specialization,
            "location": self.location,
            "languages": self.languages,
            "website": self.website,
            "social_media": self.social_media,
            "membership_tier": self.membership_tier.value,
            "verification_status": self.verification_status.value,
            "is_verified": self.is_verified,
            "verified_at": isoformat(self.verified_at),
            "mentor_id": str(self.mentor_id) if self.mentor_id else None,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class Publication(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A piece of published work credited to a journalist."""

    __tablename__ = "publications"

    journalist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("journalist_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    outlet: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    journalist: Mapped["JournalistProfile"] = relationship("JournalistProfile", back_populates="publications")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "journalist_id": str(self.journalist_id),
            "title": self.title,
            "outlet": self.outlet,
            "url": self.url,
            "summary": self.summary,
            "published_at": isoformat(self.published_at),
            "created_at": isoformat(self.created_at),
        }
