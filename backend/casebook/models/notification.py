"""
Notification Models
===================

- Notification: in-app message for one user
- EmailSubscription: a user's email digest settings
- EmailQueue: outbound email awaiting delivery

EmailQueue is the only stateful record in the system. Rows move
PENDING -> SENDING -> SENT, or fall back to PENDING after a failed
attempt until ``attempts`` reaches the cap and the row becomes FAILED.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casebook.core.enums import (
    EmailFrequency,
    EmailStatus,
    NotificationPriority,
    NotificationType,
)
from casebook.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, isoformat

if TYPE_CHECKING:
    from casebook.models.user import User


class Notification(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "notifications"

    def __init__(self, **kwargs):
        kwargs.setdefault("priority", NotificationPriority.MEDIUM)
        kwargs.setdefault("is_read", False)
        super().__init__(**kwargs)

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[NotificationType] = mapped_column(
        SAEnum(NotificationType, native_enum=False, length=50),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    priority: Mapped[NotificationPriority] = mapped_column(
        SAEnum(NotificationPriority, native_enum=False, length=20),
        nullable=False,
        default=NotificationPriority.MEDIUM,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    entity_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    entity_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="notifications")

    __table_args__ = (
        Index("ix_notifications_user_id_is_read", "user_id", "is_read"),
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "data": self.data,
            "priority": self.priority.value,
            "is_read": self.is_read,
            "entity_id": self.entity_id,
            "entity_type": self.entity_type,
            "created_at": isoformat(self.created_at),
        }


class EmailSubscription(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "email_subscriptions"

    def __init__(self, **kwargs):
        kwargs.setdefault("frequency", EmailFrequency.DAILY)
        kwargs.setdefault("is_active", True)
        super().__init__(**kwargs)

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    preferences: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    frequency: Mapped[EmailFrequency] = mapped_column(
        SAEnum(EmailFrequency, native_enum=False, length=20),
        nullable=False,
        default=EmailFrequency.DAILY,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="email_subscription")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "email": self.email,
            "preferences": self.preferences or {},
            "frequency": self.frequency.value,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class EmailQueue(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Outbound email row.

    Attributes:
        status: Delivery state
        attempts: Failed delivery attempts so far
        error: Last delivery error, cleared on success
    """

    __tablename__ = "email_queue"

    def __init__(self, **kwargs):
        kwargs.setdefault("status", EmailStatus.PENDING)
        kwargs.setdefault("attempts", 0)
        super().__init__(**kwargs)

    to_address: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    html_content: Mapped[str] = mapped_column(Text, nullable=False)
    text_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    template_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    status: Mapped[EmailStatus] = mapped_column(
        SAEnum(EmailStatus, native_enum=False, length=20),
        nullable=False,
        default=EmailStatus.PENDING,
    )
    attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_email_queue_status_attempts", "status", "attempts"),
    )

    def __repr__(self) -> str:
        return f"<EmailQueue(id={self.id}, to={self.to_address}, status={self.status})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "to_address": self.to_address,
            "subject": self.subject,
            "template_id": self.template_id,
            "status": self.status.value,
            "attempts": self.attempts,
            "error": self.error,
            "sent_at": isoformat(self.sent_at),
            "created_at": isoformat(self.created_at),
        }
