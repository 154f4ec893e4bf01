"""
Verification Schemas Module
===========================
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from casebook.core.enums import VerificationStatus, VerificationTarget


class VerificationCreate(BaseModel):
    """
    A verification judgment.

    The verifier and verifier type come from the authenticated caller,
    never from the body.
    """

    target_id: UUID
    target_type: VerificationTarget
    status: VerificationStatus
    confidence: Optional[int] = Field(default=None, ge=1, le=100)
    notes: Optional[str] = None
    evidence: Optional[str] = None
