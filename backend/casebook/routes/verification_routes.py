"""
Verification Routes Module
==========================

Endpoints:
- GET  /api/verifications - List verifications visible to the caller
- POST /api/verifications - Record a verification judgment
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from casebook.core.dependencies.auth import get_current_user
from casebook.core.enums import VerificationTarget
from casebook.db.session import get_db
from casebook.models.user import User
from casebook.schemas import ErrorResponse, Pagination, VerificationCreate
from casebook.services.verification_service import VerificationService


router = APIRouter(
    prefix="/api/verifications",
    tags=["Verifications"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Target not found"},
    },
)


@router.get(
    "",
    summary="List Verifications",
    description="Admin-level users see every verification; others see the ones they recorded.",
)
def list_verifications(
    target_id: Optional[UUID] = Query(None),
    target_type: Optional[VerificationTarget] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    verifications, total = VerificationService(db).list_verifications(
        current_user,
        target_id=target_id,
        target_type=target_type,
        page=page,
        limit=limit,
    )
    return {
        "verifications": [verification.to_dict() for verification in verifications],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    }


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Record Verification",
    description="""
    Record a judgment on a case, source, document or journalist.

    The verifier type follows the caller's role. When the target is a
    case owned by another journalist, that journalist is notified.
    """,
)
def create_verification(
    verification_data: VerificationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Raises:
        NotFoundError: The target does not exist for its type
    """
    return VerificationService(db).create_verification(current_user, verification_data).to_dict()
