"""
Document Model
==============

Evidence files attached to a case. The binary lives on disk under the
upload directory; the row keeps its public path and metadata.
"""

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, Enum as SAEnum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casebook.core.enums import DocumentType
from casebook.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, isoformat

if TYPE_CHECKING:
    from casebook.models.case import Case
    from casebook.models.user import User


class Document(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Uploaded document.

    Attributes:
        file_name: Original client file name, used for downloads
        file_path: Public path, ``/uploads/documents/<stored name>``
        file_type: Content type reported at upload
        is_public: Visible to users who cannot edit the parent case
    """

    __tablename__ = "documents"

    def __init__(self, **kwargs):
        kwargs.setdefault("is_public", False)
        kwargs.setdefault("document_type", DocumentType.EVIDENCE)
        super().__init__(**kwargs)

    case_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    file_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    file_size: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    document_type: Mapped[DocumentType] = mapped_column(
        SAEnum(DocumentType, native_enum=False, length=30),
        nullable=False,
        default=DocumentType.EVIDENCE,
    )
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    uploaded_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    case: Mapped["Case"] = relationship("Case", back_populates="documents")
    uploader: Mapped[Optional["User"]] = relationship("User")

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, case_id={self.case_id}, file_name={self.file_name})>"

    @property
    def stored_name(self) -> str:
        """File name on disk, the last segment of ``file_path``."""
        return self.file_path.rsplit("/", 1)[-1]

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "case_id": str(self.case_id),
            "title": self.title,
            "description": self.description,
            "file_name": self.file_name,
            "file_path": self.file_path,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "document_type": self.document_type.value,
            "is_public": self.is_public,
            "uploaded_by": str(self.uploaded_by) if self.uploaded_by else None,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
