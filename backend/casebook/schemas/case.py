"""
Case Schemas Module
===================

Request bodies for cases and the records attached to them.
Responses are built from the models' ``to_dict`` output.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from casebook.core.enums import CaseStatus, Priority


class CaseCreate(BaseModel):
    """New case. Status always starts at DRAFT."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)
    content: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=100)
    tags: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=255)
    priority: Priority = Priority.MEDIUM
    is_public: bool = False

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "title": "Missing funds in rural road scheme",
                "description": "Tracking disbursement of road scheme funds.",
                "category": "Corruption",
                "tags": "roads,funds",
                "location": "Bihar",
                "priority": "HIGH",
                "is_public": True,
            }
        },
    )


class CaseUpdateRequest(BaseModel):
    """Partial case update. Only fields present in the body are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    tags: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=255)
    priority: Optional[Priority] = None
    status: Optional[CaseStatus] = None
    is_public: Optional[bool] = None

    model_config = ConfigDict(str_strip_whitespace=True)


# ==========================
# Case Children
# ==========================

class TimelineEventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    event_date: datetime
    event_type: Optional[str] = Field(default=None, max_length=100)


class SourceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    source_type: Optional[str] = Field(default=None, max_length=100)
    contact_info: Optional[str] = None
    is_confidential: bool = False
    reliability: Optional[int] = Field(default=None, ge=1, le=5)


class AuthorityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    designation: Optional[str] = Field(default=None, max_length=255)
    department: Optional[str] = Field(default=None, max_length=255)
    contact_info: Optional[str] = None
    response_status: Optional[str] = Field(default=None, max_length=100)


class CaseUpdateCreate(BaseModel):
    """A progress update posted on a case."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

    model_config = ConfigDict(str_strip_whitespace=True)
