"""
Admin Routes Module
===================

Administrative endpoints for the newsroom staff.

Features:
- Dashboard statistics (admin-level)
- Email queue processing (admin-level)
- Journalist verification, tier and mentor changes (admin-level)
- Account management (ADMIN only)

Security:
- Admin-level means ADMIN or MODERATOR
- All changes are audit logged
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from casebook.core.dependencies.rbac import require_admin, require_super_admin
from casebook.core.exceptions import UserNotFoundError
from casebook.core.logging import audit_logger, get_logger
from casebook.db.session import get_db
from casebook.models.role_enum import Role
from casebook.models.user import User
from casebook.schemas import (
    AccountUnlockResponse,
    ErrorResponse,
    JournalistAdminUpdate,
    Pagination,
    UserResponse,
    UserUpdate,
)
from casebook.services.dashboard_service import generate_dashboard
from casebook.services.email_queue_service import EmailQueueService
from casebook.services.journalist_service import JournalistService

logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Insufficient permissions"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# =====================================
# Dashboard Endpoint
# =====================================

@router.get(
    "/dashboard",
    summary="Admin Dashboard",
    description="""
    Site statistics: overview counts, cases by status, journalists by
    verification status, and the five newest cases and users.
    """,
    responses={200: {"description": "Dashboard statistics"}},
)
def admin_dashboard(
    request: Request,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    """
    Get admin dashboard statistics.

    Args:
        request: FastAPI request
        current_user: Current authenticated user (admin-level)
        db: Database session

    Returns:
        Dashboard statistics
    """
    dashboard = generate_dashboard(db)

    logger.info(
        "Admin dashboard accessed",
        extra={
            "user_id": str(current_user.id),
            "ip_address": _client_ip(request),
        },
    )

    return dashboard


# =====================================
# Email Queue Endpoint
# =====================================

@router.post(
    "/email-queue",
    summary="Process Email Queue",
    description="Deliver one batch of pending email. Failed sends are retried on later runs.",
)
def process_email_queue(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    summary = EmailQueueService(db).process_email_queue()

    logger.info(
        "Email queue processed on request",
        extra={"user_id": str(current_user.id), **summary},
    )

    return {"message": "Email queue processed successfully", "summary": summary}


# =====================================
# Journalist Management Endpoint
# =====================================

@router.patch(
    "/journalists/{profile_id}",
    summary="Update Journalist Status",
    description="""
    Change verification status, membership tier or mentor.

    Setting VERIFIED marks the profile verified and notifies the journalist.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Profile cannot mentor itself"},
        404: {"model": ErrorResponse, "description": "Profile or mentor not found"},
    },
)
def update_journalist_status(
    profile_id: UUID,
    update_data: JournalistAdminUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    service = JournalistService(db)
    profile = service.admin_update(profile_id, current_user, update_data)
    return service.detail(profile, own=True)


# =====================================
# User Management Endpoints
# =====================================

@router.get(
    "/users",
    summary="List All Users",
    description="List accounts with optional role and status filters. Requires ADMIN role.",
)
def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Users per page"),
    role: Optional[Role] = Query(None, description="Filter by role"),
    is_active: Optional[bool] = Query(None, description="Filter by active status"),
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> dict:
    """
    List all users with pagination and filtering.

    Returns:
        {"users": [...], "pagination": {...}}
    """
    query = db.query(User)

    if role:
        query = query.filter(User.role == role)
    if is_active is not None:
        query = query.filter(User.is_active.is_(is_active))

    total = query.count()
    users = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit).all()

    return {
        "users": [user.to_dict() for user in users],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    }


def _get_user_or_404(db: Session, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(identifier=str(user_id))
    return user


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Get User by ID",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
def get_user(
    user_id: UUID,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> User:
    return _get_user_or_404(db, user_id)


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update User",
    description="Change name, role or active status. Requires ADMIN role.",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
def update_user(
    user_id: UUID,
    update_data: UserUpdate,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> User:
    """
    Update user information.

    Args:
        user_id: User UUID
        update_data: Update data
        current_user: Current authenticated user
        db: Database session

    Returns:
        Updated user details
    """
    user = _get_user_or_404(db, user_id)

    # Track changes for audit
    changes = {}

    if update_data.name is not None and update_data.name != user.name:
        changes["name"] = {"old": user.name, "new": update_data.name}
        user.name = update_data.name

    if update_data.role is not None and update_data.role != user.role:
        changes["role"] = {"old": user.role.value, "new": update_data.role.value}
        user.role = update_data.role

    if update_data.is_active is not None and update_data.is_active != user.is_active:
        changes["is_active"] = {"old": user.is_active, "new": update_data.is_active}
        user.is_active = update_data.is_active

    db.commit()
    db.refresh(user)

    if changes:
        audit_logger.log_user_modified(
            actor_id=str(current_user.id),
            target_user_id=str(user.id),
            changes=changes,
        )

    return user


@router.post(
    "/users/{user_id}/unlock",
    response_model=AccountUnlockResponse,
    summary="Unlock User Account",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
def unlock_user(
    user_id: UUID,
    request: Request,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> dict:
    """
    Unlock a locked user account and reset its failed attempts.
    """
    user = _get_user_or_404(db, user_id)

    if not user.is_locked:
        return {"message": "Account is not locked", "user_id": str(user_id)}

    user.unlock_account()
    db.commit()

    logger.info(
        "User account unlocked by admin",
        extra={
            "admin_id": str(current_user.id),
            "target_user_id": str(user.id),
            "ip_address": _client_ip(request),
        },
    )

    return {"message": "Account unlocked successfully", "user_id": str(user_id)}
