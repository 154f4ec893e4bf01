"""
Document Service Module
=======================

Upload, listing, editing, deletion and download of case documents.
File bytes go through StorageService; this module owns the rows and
the permission checks.
"""

import json
from pathlib import Path
from typing import BinaryIO, Optional
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from casebook.core.access.visibility import (
    VisibilityScope,
    can_edit_case,
    can_edit_document,
    can_view_document,
    ensure,
)
from casebook.core.enums import NotificationType
from casebook.core.exceptions import (
    CaseNotFoundError,
    DocumentNotFoundError,
    MissingFileError,
    ValidationError,
)
from casebook.core.logging import audit_logger, get_logger
from casebook.models.case import Case
from casebook.models.document import Document
from casebook.models.user import User
from casebook.schemas.document import DocumentMetadata, DocumentUpdate
from casebook.services.notification_service import NotificationService, case_url
from casebook.services.storage_service import StorageService

logger = get_logger(__name__)

NULLABLE_FIELDS = {"description"}


def parse_metadata(raw: Optional[str]) -> DocumentMetadata:
    """
    Parse the ``metadata`` form field.

    Raises:
        ValidationError: If the field is missing, not JSON, or invalid
    """
    if not raw:
        raise ValidationError(message="Document metadata is required")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(message="Invalid metadata JSON", details={"error": str(e)})
    try:
        return DocumentMetadata.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            message="Invalid document metadata",
            details={
                "errors": [
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"], "type": err["type"]}
                    for err in e.errors()
                ]
            },
        )


def with_case(document: Document) -> dict:
    item = document.to_dict()
    case = document.case
    item["case"] = {
        "id": str(case.id),
        "title": case.title,
        "slug": case.slug,
        "journalist_id": str(case.journalist_id) if case.journalist_id else None,
    }
    return item


class DocumentService:
    def __init__(self, db: Session, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage or StorageService()

    # --------------------------
    # Queries
    # --------------------------

    def list_documents(
        self,
        current_user: User,
        case_id: Optional[UUID] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Document], int]:
        query = VisibilityScope(self.db, current_user).documents()
        if case_id:
            query = query.filter(Document.case_id == case_id)

        total = query.count()
        documents = (
            query.order_by(Document.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return documents, total

    def get(self, document_id: UUID) -> Document:
        document = self.db.get(Document, document_id)
        if document is None:
            raise DocumentNotFoundError(identifier=str(document_id))
        return document

    def get_visible(self, document_id: UUID, current_user: Optional[User]) -> Document:
        document = self.get(document_id)
        ensure(
            can_view_document(current_user, document),
            current_user, f"document:{document_id}", "view",
        )
        return document

    def get_editable(self, document_id: UUID, current_user: User) -> Document:
        document = self.get(document_id)
        ensure(
            can_edit_document(current_user, document),
            current_user, f"document:{document_id}", "edit",
        )
        return document

    # --------------------------
    # Mutations
    # --------------------------

    def upload(
        self,
        current_user: User,
        stream: Optional[BinaryIO],
        filename: Optional[str],
        content_type: Optional[str],
        raw_metadata: Optional[str],
    ) -> Document:
        """
        Store an uploaded file and create its document row.

        Raises:
            MissingFileError: If no file was sent
            ValidationError: If metadata is invalid
            FileTooLargeError: If the file exceeds the upload limit
            CaseNotFoundError: If the target case does not exist
            AccessDeniedError: If the caller cannot edit the case
        """
        if stream is None or not filename:
            raise MissingFileError()

        metadata = parse_metadata(raw_metadata)

        case = self.db.get(Case, metadata.case_id)
        if case is None:
            raise CaseNotFoundError(identifier=str(metadata.case_id))
        ensure(can_edit_case(current_user, case), current_user, f"case:{case.id}", "upload")

        file_path, size = self.storage.save(stream, filename)

        document = Document(
            case_id=case.id,
            title=metadata.title,
            description=metadata.description,
            document_type=metadata.document_type,
            is_public=metadata.is_public,
            file_name=Path(filename).name,
            file_path=file_path,
            file_type=content_type,
            file_size=size,
            uploaded_by=current_user.id,
        )
        try:
            self.db.add(document)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error("Document row insert failed", extra={"path": file_path, "error": str(e)})
            self.db.rollback()
            self.storage.delete(file_path)
            raise
        self.db.refresh(document)

        audit_logger.log_document_uploaded(str(current_user.id), str(document.id), str(case.id))

        if document.is_public:
            NotificationService(self.db).notify_case_subscribers(
                case.id,
                NotificationType.DOCUMENT_UPLOADED,
                title=f"New Document: {document.title}",
                message=f"A new document has been added to {case.title}",
                data={
                    "case_id": str(case.id),
                    "case_slug": case.slug,
                    "document_id": str(document.id),
                    "case_url": case_url(case.slug),
                },
                exclude_user_id=current_user.id,
            )
        return document

    def update(self, document_id: UUID, current_user: User, data: DocumentUpdate) -> Document:
        document = self.get_editable(document_id, current_user)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field not in NULLABLE_FIELDS:
                continue
            setattr(document, field, value)
        self.db.commit()
        self.db.refresh(document)
        return document

    def delete(self, document_id: UUID, current_user: User) -> None:
        """Delete the row; a failure to remove the file is logged only."""
        document = self.get_editable(document_id, current_user)
        file_path = document.file_path

        self.db.delete(document)
        self.db.commit()
        self.storage.delete(file_path)

        audit_logger.log_document_deleted(str(current_user.id), str(document_id))

    def file_for_download(self, document_id: UUID, current_user: Optional[User]) -> tuple[Document, Path]:
        """
        Raises:
            StoredFileMissingError: If the row exists but the file does not
        """
        document = self.get_visible(document_id, current_user)
        return document, self.storage.resolve(document.file_path)
