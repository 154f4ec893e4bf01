"""
Journalist Routes Module
========================

Endpoints:
- GET  /api/journalists                  - Public directory
- GET  /api/journalists/me               - Own profile (all cases and publications)
- PUT  /api/journalists/me               - Edit own profile
- POST /api/journalists/me/publications  - Add a publication
- GET  /api/journalists/{id}             - Public profile page
- PUT  /api/journalists/{id}             - Edit a profile (owner or admin)

`/me` routes are registered before `/{id}` so they are not captured
by the path parameter.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from casebook.core.dependencies.auth import get_current_user
from casebook.db.session import get_db
from casebook.models.user import User
from casebook.schemas import ErrorResponse, JournalistProfileUpdate, Pagination, PublicationCreate
from casebook.services.journalist_service import JournalistService

VERIFICATION_FILTERS = {"verified": True, "unverified": False}


router = APIRouter(
    prefix="/api/journalists",
    tags=["Journalists"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Access denied"},
        404: {"model": ErrorResponse, "description": "Journalist profile not found"},
    },
)


# =====================================
# Directory
# =====================================

@router.get(
    "",
    summary="List Journalists",
    description="""
    Public directory, newest profiles first.

    * `search` matches name, bio or specialization
    * `specialization` and `location` are substring filters
    * `verification` is `verified` or `unverified`
    """,
)
def list_journalists(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    search: Optional[str] = Query(None),
    specialization: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    verification: Optional[str] = Query(None, pattern="^(verified|unverified)$"),
    db: Session = Depends(get_db),
) -> dict:
    service = JournalistService(db)
    profiles, total = service.list_journalists(
        page=page,
        limit=limit,
        search=search,
        specialization=specialization,
        location=location,
        verified=VERIFICATION_FILTERS.get(verification) if verification else None,
    )
    return {
        "journalists": service.summarize(profiles),
        "pagination": Pagination.build(page, limit, total).model_dump(),
    }


# =====================================
# Own Profile
# =====================================

@router.get("/me", summary="Get Own Profile")
def get_own_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    The caller's profile with every case and publication.

    Raises:
        JournalistProfileNotFoundError: The caller has no profile
    """
    service = JournalistService(db)
    return service.detail(service.get_own(current_user), own=True)


@router.put("/me", summary="Update Own Profile")
def update_own_profile(
    profile_data: JournalistProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    service = JournalistService(db)
    profile = service.update_profile(service.get_own(current_user), current_user, profile_data)
    return service.detail(profile, own=True)


@router.post(
    "/me/publications",
    status_code=status.HTTP_201_CREATED,
    summary="Add Publication",
)
def add_publication(
    publication_data: PublicationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return JournalistService(db).add_publication(current_user, publication_data).to_dict()


# =====================================
# Public Profile
# =====================================

@router.get(
    "/{profile_id}",
    summary="Get Journalist",
    description="Profile page with mentor, mentees, recent public cases and publications.",
)
def get_journalist(
    profile_id: UUID,
    db: Session = Depends(get_db),
) -> dict:
    service = JournalistService(db)
    return service.detail(service.get(profile_id))


@router.put("/{profile_id}", summary="Update Journalist")
def update_journalist(
    profile_id: UUID,
    profile_data: JournalistProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Raises:
        JournalistProfileNotFoundError: Unknown profile
        AccessDeniedError: Caller is neither the owner nor admin-level
    """
    service = JournalistService(db)
    profile = service.update_profile(service.get(profile_id), current_user, profile_data)
    return service.detail(profile, own=profile.user_id == current_user.id)
