"""
Shared Schemas
==============

Pagination envelope used by every list endpoint:

    {"<plural>": [...], "pagination": {"page", "limit", "total", "pages"}}
"""

import math

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1, le=100)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class MessageResponse(BaseModel):
    message: str
