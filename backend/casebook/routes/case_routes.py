"""
Case Routes Module
==================

Endpoints:
- GET    /api/cases                       - Browse visible cases
- POST   /api/cases                       - Create a case (JOURNALIST, ADMIN)
- GET    /api/cases/by-slug/{slug}        - Case detail by slug
- GET    /api/cases/{case_id}             - Case detail
- PUT    /api/cases/{case_id}             - Edit a case
- DELETE /api/cases/{case_id}             - Delete a case
- POST   /api/cases/{case_id}/timeline    - Add a timeline event
- POST   /api/cases/{case_id}/sources     - Add a source
- POST   /api/cases/{case_id}/authorities - Add an authority
- POST   /api/cases/{case_id}/updates     - Post an update (notifies followers)
- POST   /api/cases/{case_id}/comments    - Comment (notifies followers)
- POST   /api/cases/{case_id}/subscribe   - Follow a case
- DELETE /api/cases/{case_id}/subscribe   - Stop following a case

Listing and detail are public; signed-in callers see more (their own
drafts, or everything for staff).
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from casebook.core.dependencies.auth import get_current_user, get_current_user_optional
from casebook.core.dependencies.rbac import require_case_author
from casebook.core.enums import CaseStatus
from casebook.core.logging import get_logger
from casebook.db.session import get_db
from casebook.models.user import User
from casebook.schemas import (
    AuthorityCreate,
    CaseCreate,
    CaseUpdateCreate,
    CaseUpdateRequest,
    CommentCreate,
    ErrorResponse,
    MessageResponse,
    Pagination,
    SourceCreate,
    TimelineEventCreate,
)
from casebook.services.case_service import CaseService

logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/api/cases",
    tags=["Cases"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Access denied"},
        404: {"model": ErrorResponse, "description": "Case not found"},
    },
)


# =====================================
# Browse & Create
# =====================================

@router.get(
    "",
    summary="List Cases",
    description="""
    Paginated list of cases visible to the caller, newest first.

    `search` matches title, description or content (case-insensitive)
    and is combined with the caller's visibility.
    """,
)
def list_cases(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Free-text search"),
    category: Optional[str] = Query(None, description="Exact category"),
    status_filter: Optional[CaseStatus] = Query(None, alias="status", description="Case status"),
    journalist_id: Optional[UUID] = Query(None, description="Owning journalist profile"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
) -> dict:
    """
    List cases.

    Returns:
        {"cases": [...], "pagination": {...}}
    """
    service = CaseService(db)
    cases, total = service.list_cases(
        current_user,
        page=page,
        limit=limit,
        search=search,
        category=category,
        status=status_filter,
        journalist_id=journalist_id,
    )
    return {
        "cases": service.summarize(cases),
        "pagination": Pagination.build(page, limit, total).model_dump(),
    }


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Case",
    description="""
    Create a case owned by the caller's journalist profile.

    The slug is derived from the title; on collision a random suffix is
    appended. New cases start as DRAFT. Public cases notify staff.
    """,
    responses={400: {"model": ErrorResponse, "description": "Invalid input"}},
)
def create_case(
    request: Request,
    case_data: CaseCreate,
    current_user: User = Depends(require_case_author),
    db: Session = Depends(get_db),
) -> dict:
    """
    Create a new case.

    Args:
        request: FastAPI request object
        case_data: Case fields
        current_user: Journalist or admin creating the case
        db: Database session

    Returns:
        The created case
    """
    service = CaseService(db)
    case = service.create_case(current_user, case_data)

    logger.info(
        "Case created via API",
        extra={
            "case_id": str(case.id),
            "slug": case.slug,
            "user_id": str(current_user.id),
        },
    )

    return service.detail(case)


# =====================================
# Detail, Edit, Delete
# =====================================

@router.get(
    "/by-slug/{slug}",
    summary="Get Case By Slug",
)
def get_case_by_slug(
    slug: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
) -> dict:
    service = CaseService(db)
    return service.detail(service.get_visible_by_slug(slug, current_user))


@router.get(
    "/{case_id}",
    summary="Get Case",
    description="Case with its timeline, documents, sources, authorities, updates and comments.",
)
def get_case(
    case_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
) -> dict:
    """
    Get case detail.

    Raises:
        CaseNotFoundError: If the case does not exist
        AccessDeniedError: If the caller cannot view the case
    """
    service = CaseService(db)
    return service.detail(service.get_visible(case_id, current_user))


@router.put(
    "/{case_id}",
    summary="Update Case",
    description="""
    Partial update. Changing the title regenerates the slug.
    Moving to PUBLISHED stamps `published_at` once and notifies followers.
    """,
)
def update_case(
    case_id: UUID,
    case_data: CaseUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    service = CaseService(db)
    case = service.update_case(case_id, current_user, case_data)
    return service.detail(case)


@router.delete(
    "/{case_id}",
    response_model=MessageResponse,
    summary="Delete Case",
    description="Delete a case with its children, documents and stored files.",
)
def delete_case(
    case_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    CaseService(db).delete_case(case_id, current_user)
    return {"message": "Case deleted successfully"}


# =====================================
# Case Children
# =====================================

@router.post(
    "/{case_id}/timeline",
    status_code=status.HTTP_201_CREATED,
    summary="Add Timeline Event",
)
def add_timeline_event(
    case_id: UUID,
    event_data: TimelineEventCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return CaseService(db).add_timeline_event(case_id, current_user, event_data).to_dict()


@router.post(
    "/{case_id}/sources",
    status_code=status.HTTP_201_CREATED,
    summary="Add Source",
)
def add_source(
    case_id: UUID,
    source_data: SourceCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return CaseService(db).add_source(case_id, current_user, source_data).to_dict()


@router.post(
    "/{case_id}/authorities",
    status_code=status.HTTP_201_CREATED,
    summary="Add Authority",
)
def add_authority(
    case_id: UUID,
    authority_data: AuthorityCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return CaseService(db).add_authority(case_id, current_user, authority_data).to_dict()


@router.post(
    "/{case_id}/updates",
    status_code=status.HTTP_201_CREATED,
    summary="Post Case Update",
    description="Post a progress update. Followers are notified.",
)
def add_update(
    case_id: UUID,
    update_data: CaseUpdateCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return CaseService(db).add_update(case_id, current_user, update_data).to_dict()


@router.post(
    "/{case_id}/comments",
    status_code=status.HTTP_201_CREATED,
    summary="Comment On Case",
    description="Any signed-in user who can view the case may comment. Other followers are notified.",
)
def add_comment(
    case_id: UUID,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return CaseService(db).add_comment(case_id, current_user, comment_data).to_dict()


# =====================================
# Subscriptions
# =====================================

@router.post(
    "/{case_id}/subscribe",
    status_code=status.HTTP_201_CREATED,
    summary="Follow Case",
)
def subscribe(
    case_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    subscription = CaseService(db).subscribe(case_id, current_user)
    return {
        "message": "Subscribed to case",
        "subscription": subscription.to_dict(),
    }


@router.delete(
    "/{case_id}/subscribe",
    response_model=MessageResponse,
    summary="Unfollow Case",
)
def unsubscribe(
    case_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    CaseService(db).unsubscribe(case_id, current_user)
    return {"message": "Unsubscribed from case"}
