"""
User Model
==========

Security Features:
- Account lock after configurable failed attempts
- Token version for JWT invalidation
- Enum-based role enforcement
- Soft disable via is_active flag

Database Indexes:
- Primary key: id (UUID)
- Unique index: email
- Index: role
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Enum as SAEnum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casebook.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, isoformat
from casebook.models.role_enum import Role

if TYPE_CHECKING:
    from casebook.models.journalist import JournalistProfile
    from casebook.models.notification import EmailSubscription, Notification


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Authenticated account.

    Every account has a role. Journalists additionally own exactly one
    JournalistProfile, created at registration.

    Security Controls:
        - failed_attempts: Counter for failed login attempts
        - is_locked: Account lock flag
        - token_version: For forced logout/token invalidation
        - is_active: Soft delete flag
    """

    __tablename__ = "users"

    def __init__(self, **kwargs):
        """Initialize User with Python-level defaults."""
        kwargs.setdefault("role", Role.PUBLIC)
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("failed_attempts", 0)
        kwargs.setdefault("is_locked", False)
        kwargs.setdefault("token_version", 1)
        super().__init__(**kwargs)

    # ==========================
    # Identity
    # ==========================
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # ==========================
    # Authorization
    # ==========================
    role: Mapped[Role] = mapped_column(
        SAEnum(Role, native_enum=False, length=50, validate_strings=True),
        nullable=False,
        default=Role.PUBLIC,
    )

    # ==========================
    # Account Status
    # ==========================
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    failed_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    token_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # ==========================
    # Relationships
    # ==========================
    journalist_profile: Mapped[Optional["JournalistProfile"]] = relationship(
        "JournalistProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    notifications: Mapped[List["Notification"]] = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    email_subscription: Mapped[Optional["EmailSubscription"]] = relationship(
        "EmailSubscription",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_users_role", "role"),
    )

    # ==========================
    # Methods
    # ==========================

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def journalist_profile_id(self):
        return self.journalist_profile.id if self.journalist_profile else None

    def lock_account(self) -> None:
        """Lock the user account."""
        self.is_locked = True

    def unlock_account(self) -> None:
        """Unlock the user account and reset failed attempts."""
        self.is_locked = False
        self.failed_attempts = 0

    def increment_failed_attempts(self, max_attempts: int = 5) -> bool:
        """
        Increment failed login attempts.

        Returns:
            True if the account is now locked
        """
        self.failed_attempts += 1
        if self.failed_attempts >= max_attempts:
            self.lock_account()
            return True
        return False

    def reset_failed_attempts(self) -> None:
        self.failed_attempts = 0

    def invalidate_tokens(self) -> None:
        """Invalidate all tokens by incrementing version."""
        self.token_version += 1

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excludes sensitive data).
        """
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "is_active": self.is_active,
            "is_locked": self.is_locked,
            "journalist_profile_id": str(self.journalist_profile_id) if self.journalist_profile_id else None,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def to_brief_dict(self) -> dict:
        return {"id": str(self.id), "name": self.name, "email": self.email}
