"""
Document Routes Module
======================

Endpoints:
- GET    /api/documents                - List visible documents
- POST   /api/documents                - Upload (multipart: file + metadata JSON)
- GET    /api/documents/download/{id}  - Download the stored file
- GET    /api/documents/{id}           - Document detail
- PUT    /api/documents/{id}           - Edit metadata
- DELETE /api/documents/{id}           - Delete row and stored file
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from casebook.core.dependencies.auth import get_current_user, get_current_user_optional
from casebook.core.dependencies.rbac import require_document_uploader
from casebook.core.logging import get_logger
from casebook.db.session import get_db
from casebook.models.user import User
from casebook.schemas import DocumentUpdate, ErrorResponse, MessageResponse, Pagination
from casebook.services.document_service import DocumentService, with_case

logger = get_logger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/api/documents",
    tags=["Documents"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Access denied"},
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)


# =====================================
# List & Upload
# =====================================

@router.get(
    "",
    summary="List Documents",
    description="Documents visible to the caller, newest first, optionally for one case.",
)
def list_documents(
    case_id: Optional[UUID] = Query(None, description="Only documents of this case"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    documents, total = DocumentService(db).list_documents(
        current_user, case_id=case_id, page=page, limit=limit
    )
    return {
        "documents": [with_case(document) for document in documents],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    }


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Upload Document",
    description="""
    Multipart upload with two fields:

    * `file`: the document itself
    * `metadata`: JSON string `{title, description?, case_id, document_type, is_public}`

    Only the case owner or an admin may attach documents to a case.
    Public documents notify the case's followers.
    """,
    responses={400: {"model": ErrorResponse, "description": "Missing file, bad metadata or file too large"}},
)
def upload_document(
    request: Request,
    file: Optional[UploadFile] = File(None),
    metadata: Optional[str] = Form(None),
    current_user: User = Depends(require_document_uploader),
    db: Session = Depends(get_db),
) -> dict:
    """
    Upload a document to a case.

    Args:
        request: FastAPI request object
        file: Uploaded file
        metadata: JSON-encoded document metadata
        current_user: Journalist or admin uploading
        db: Database session

    Returns:
        The created document with its case

    Raises:
        MissingFileError: No file part was sent
        ValidationError: Metadata missing or invalid
        FileTooLargeError: File exceeds the configured limit
    """
    document = DocumentService(db).upload(
        current_user,
        stream=file.file if file is not None else None,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        raw_metadata=metadata,
    )

    logger.info(
        "Document uploaded via API",
        extra={
            "document_id": str(document.id),
            "case_id": str(document.case_id),
            "file_size": document.file_size,
            "user_id": str(current_user.id),
            "ip_address": request.client.host if request.client else "unknown",
        },
    )

    return with_case(document)


# =====================================
# Download
# =====================================

@router.get(
    "/download/{document_id}",
    summary="Download Document",
    description="Stream the stored file as an attachment.",
    response_class=FileResponse,
)
def download_document(
    document_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    """
    Raises:
        StoredFileMissingError: The row exists but the file is gone
    """
    document, path = DocumentService(db).file_for_download(document_id, current_user)
    return FileResponse(
        path,
        media_type=document.file_type or DEFAULT_MEDIA_TYPE,
        filename=document.file_name,
    )


# =====================================
# Detail, Edit, Delete
# =====================================

@router.get("/{document_id}", summary="Get Document")
def get_document(
    document_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
) -> dict:
    return with_case(DocumentService(db).get_visible(document_id, current_user))


@router.put("/{document_id}", summary="Update Document")
def update_document(
    document_id: UUID,
    document_data: DocumentUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return with_case(DocumentService(db).update(document_id, current_user, document_data))


@router.delete(
    "/{document_id}",
    response_model=MessageResponse,
    summary="Delete Document",
    description="Delete the document. A stored file that cannot be removed is logged, not fatal.",
)
def delete_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    DocumentService(db).delete(document_id, current_user)
    return {"message": "Document deleted successfully"}
