"""
Database Base Definition
========================

Defines the SQLAlchemy Declarative Base and the shared column mixins.

All ORM models must inherit from this Base.
"""

import uuid
from datetime import datetime, UTC

from sqlalchemy import DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

# Base class for all database models
Base = declarative_base()


def utc_now() -> datetime:
    return datetime.now(UTC)


class UUIDPrimaryKeyMixin:
    """UUID primary key shared by every table."""

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True,
    )


class TimestampMixin:
    """
    created_at / updated_at columns.

    The Python-side default keeps sub-second ordering stable on SQLite,
    where ``now()`` only has second resolution.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        nullable=False,
    )


def isoformat(value: datetime | None) -> str | None:
    """Serialize an optional datetime for JSON responses."""
    return value.isoformat() if value else None
