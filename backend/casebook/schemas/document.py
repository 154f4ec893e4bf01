"""
Document Schemas Module
=======================

Uploads arrive as multipart form data; the ``metadata`` form field is a
JSON string validated against DocumentMetadata.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from casebook.core.enums import DocumentType


class DocumentMetadata(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    case_id: UUID
    document_type: DocumentType = DocumentType.EVIDENCE
    is_public: bool = False


class DocumentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    document_type: Optional[DocumentType] = None
    is_public: Optional[bool] = None
