"""
Verification Model
==================

A peer or staff judgment on a case, source, document or journalist.
``target_id`` is polymorphic: its table is selected by ``target_type``,
so no foreign key is declared on it.
"""

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Enum as SAEnum, ForeignKey, Index, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casebook.core.enums import VerificationStatus, VerificationTarget, VerifierType
from casebook.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, isoformat

if TYPE_CHECKING:
    from casebook.models.user import User


class Verification(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "verifications"

    target_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    target_type: Mapped[VerificationTarget] = mapped_column(
        SAEnum(VerificationTarget, native_enum=False, length=20),
        nullable=False,
    )
    status: Mapped[VerificationStatus] = mapped_column(
        SAEnum(VerificationStatus, native_enum=False, length=20),
        nullable=False,
        default=VerificationStatus.PENDING,
    )
    confidence: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    evidence: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    verifier_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    verifier_type: Mapped[VerifierType] = mapped_column(
        SAEnum(VerifierType, native_enum=False, length=20),
        nullable=False,
    )

    verifier: Mapped["User"] = relationship("User")

    __table_args__ = (
        Index("ix_verifications_target", "target_type", "target_id"),
    )

    def to_dict(self) -> dict:
        verifier = self.verifier
        return {
            "id": str(self.id),
            "target_id": str(self.target_id),
            "target_type": self.target_type.value,
            "status": self.status.value,
            "confidence": self.confidence,
            "notes": self.notes,
            "evidence": self.evidence,
            "verifier_id": str(self.verifier_id),
            "verifier_type": self.verifier_type.value,
            "verifier": {
                "id": str(verifier.id),
                "name": verifier.name,
                "email": verifier.email,
                "role": verifier.role.value,
            } if verifier else None,
            "created_at": isoformat(self.created_at),
        }
