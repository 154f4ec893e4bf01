"""
Case Models
===========

A Case is the central record: an investigative story tracked by a
journalist. Everything hanging off a case (timeline, sources,
authorities, updates, comments and subscriptions) is deleted with it.

Database Indexes:
- Unique index: cases.slug
- Index: cases.status, cases.is_public, cases.journalist_id
- Unique constraint: case_subscriptions (user_id, case_id)
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casebook.core.enums import CaseStatus, Priority
from casebook.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, isoformat

if TYPE_CHECKING:
    from casebook.models.document import Document
    from casebook.models.journalist import JournalistProfile
    from casebook.models.user import User


def _case_fk():
    return mapped_column(
        UUID(as_uuid=True),
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class Case(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Investigative case.

    Attributes:
        slug: URL-safe unique identifier derived from the title
        status: Editorial lifecycle state
        is_public: Visible to anonymous and PUBLIC users when True
        published_at: Set on the first transition to PUBLISHED
        journalist_id: Owning JournalistProfile
    """

    __tablename__ = "cases"

    def __init__(self, **kwargs):
        kwargs.setdefault("status", CaseStatus.DRAFT)
        kwargs.setdefault("priority", Priority.MEDIUM)
        kwargs.setdefault("is_public", False)
        super().__init__(**kwargs)

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(600), unique=True, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    tags: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    priority: Mapped[Priority] = mapped_column(
        SAEnum(Priority, native_enum=False, length=20),
        nullable=False,
        default=Priority.MEDIUM,
    )
    status: Mapped[CaseStatus] = mapped_column(
        SAEnum(CaseStatus, native_enum=False, length=30),
        nullable=False,
        default=CaseStatus.DRAFT,
    )
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    journalist_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("journalist_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ==========================
    # Relationships
    # ==========================
    journalist: Mapped[Optional["JournalistProfile"]] = relationship(
        "JournalistProfile", back_populates="cases"
    )

    timeline: Mapped[List["TimelineEvent"]] = relationship(
        "TimelineEvent",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TimelineEvent.event_date.desc()",
    )
    sources: Mapped[List["Source"]] = relationship(
        "Source",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Source.created_at.desc()",
    )
    authorities: Mapped[List["Authority"]] = relationship(
        "Authority",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Authority.created_at.desc()",
    )
    updates: Mapped[List["CaseUpdate"]] = relationship(
        "CaseUpdate",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CaseUpdate.created_at.desc()",
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.created_at.desc()",
    )
    subscriptions: Mapped[List["CaseSubscription"]] = relationship(
        "CaseSubscription",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    documents: Mapped[List["Document"]] = relationship(
        "Document",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Document.created_at.desc()",
    )

    __table_args__ = (
        Index("ix_cases_status", "status"),
        Index("ix_cases_is_public", "is_public"),
        Index("ix_cases_journalist_id", "journalist_id"),
    )

    def __repr__(self) -> str:
        return f"<Case(id={self.id}, slug={self.slug}, status={self.status})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "content": self.content,
            "category": self.category,
            "tags": self.tags,
            "location": self.location,
            "priority": self.priority.value,
            "status": self.status.value,
            "is_public": self.is_public,
            "published_at": isoformat(self.published_at),
            "journalist_id": str(self.journalist_id) if self.journalist_id else None,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class TimelineEvent(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "timeline_events"

    case_id: Mapped[uuid.UUID] = _case_fk()
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    event_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    case: Mapped["Case"] = relationship("Case", back_populates="timeline")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "case_id": str(self.case_id),
            "title": self.title,
            "description": self.description,
            "event_date": isoformat(self.event_date),
            "event_type": self.event_type,
            "created_at": isoformat(self.created_at),
        }


class Source(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A source of information for a case. Reliability is rated 1 to 5."""

    __tablename__ = "sources"

    def __init__(self, **kwargs):
        kwargs.setdefault("is_confidential", False)
        super().__init__(**kwargs)

    case_id: Mapped[uuid.UUID] = _case_fk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    contact_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_confidential: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reliability: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    case: Mapped["Case"] = relationship("Case", back_populates="sources")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "case_id": str(self.case_id),
            "name": self.name,
            "description": self.description,
            "source_type": self.source_type,
            "contact_info": self.contact_info,
            "is_confidential": self.is_confidential,
            "reliability": self.reliability,
            "created_at": isoformat(self.created_at),
        }


class Authority(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An official body or officer a case has been raised with."""

    __tablename__ = "authorities"

    case_id: Mapped[uuid.UUID] = _case_fk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    designation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    response_status: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    case: Mapped["Case"] = relationship("Case", back_populates="authorities")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "case_id": str(self.case_id),
            "name": self.name,
            "designation": self.designation,
            "department": self.department,
            "contact_info": self.contact_info,
            "response_status": self.response_status,
            "created_at": isoformat(self.created_at),
        }


class CaseUpdate(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "case_updates"

    case_id: Mapped[uuid.UUID] = _case_fk()
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    case: Mapped["Case"] = relationship("Case", back_populates="updates")
    author: Mapped[Optional["User"]] = relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "case_id": str(self.case_id),
            "title": self.title,
            "content": self.content,
            "author_id": str(self.author_id) if self.author_id else None,
            "created_at": isoformat(self.created_at),
        }


class Comment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "comments"

    case_id: Mapped[uuid.UUID] = _case_fk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    case: Mapped["Case"] = relationship("Case", back_populates="comments")
    user: Mapped["User"] = relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "case_id": str(self.case_id),
            "content": self.content,
            "user": {"name": self.user.name, "email": self.user.email} if self.user else None,
            "created_at": isoformat(self.created_at),
        }


class CaseSubscription(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A user following a case. One row per (user, case) pair."""

    __tablename__ = "case_subscriptions"

    def __init__(self, **kwargs):
        kwargs.setdefault("is_active", True)
        super().__init__(**kwargs)

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    case_id: Mapped[uuid.UUID] = _case_fk()
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    case: Mapped["Case"] = relationship("Case", back_populates="subscriptions")
    user: Mapped["User"] = relationship("User")

    __table_args__ = (
        UniqueConstraint("user_id", "case_id", name="uq_case_subscriptions_user_case"),
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "case_id": str(self.case_id),
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
        }
