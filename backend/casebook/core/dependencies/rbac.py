"""
Role-Based Access Control (RBAC) Dependencies Module
=====================================================

FastAPI dependencies for role-based authorization.

Usage:
    @router.get("/dashboard")
    def dashboard(user: User = Depends(require_admin)):
        ...
"""

from typing import Callable

from fastapi import Depends, HTTPException, Request, status

from casebook.core.dependencies.auth import get_current_user
from casebook.core.logging import get_logger, security_logger
from casebook.models.role_enum import Role
from casebook.models.user import User

logger = get_logger(__name__)


# =====================================
# Role Hierarchy
# =====================================

# Higher index = more permissions
ROLE_HIERARCHY: list[Role] = [
    Role.PUBLIC,
    Role.JOURNALIST,
    Role.MODERATOR,
    Role.ADMIN,
]


def get_role_level(role: Role) -> int:
    try:
        return ROLE_HIERARCHY.index(role)
    except ValueError:
        return -1


def has_role_or_higher(user_role: Role, required_role: Role) -> bool:
    return get_role_level(user_role) >= get_role_level(required_role)


def _deny(request: Request, user: User, detail: str) -> HTTPException:
    security_logger.log_unauthorized_access(
        user_id=str(user.id),
        resource=request.url.path,
        action=request.method,
    )
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


# =====================================
# Role Requirement Dependencies
# =====================================

def require_role(*allowed_roles: Role, detail: str = "Insufficient permissions for this action") -> Callable:
    """
    Create a dependency that admits only the listed roles.

    Args:
        *allowed_roles: Roles that are allowed access
        detail: Message returned with the 403

    Usage:
        @router.post("/cases")
        def create(user: User = Depends(require_role(Role.JOURNALIST, Role.ADMIN))):
            ...
    """
    def role_checker(
        request: Request,
        current_user: User = Depends(get_current_user),
    ) -> User:
        if current_user.role not in allowed_roles:
            logger.warning(
                "Role-based access denied",
                extra={
                    "user_role": current_user.role.value,
                    "required_roles": [r.value for r in allowed_roles],
                    "path": request.url.path,
                },
            )
            raise _deny(request, current_user, detail)
        return current_user

    return role_checker


def require_role_or_higher(minimum_role: Role, detail: str = "Insufficient permissions for this action") -> Callable:
    """Create a dependency that admits ``minimum_role`` and every role above it."""
    def role_checker(
        request: Request,
        current_user: User = Depends(get_current_user),
    ) -> User:
        if not has_role_or_higher(current_user.role, minimum_role):
            logger.warning(
                "Hierarchical role access denied",
                extra={
                    "user_role": current_user.role.value,
                    "minimum_role": minimum_role.value,
                    "path": request.url.path,
                },
            )
            raise _deny(request, current_user, detail)
        return current_user

    return role_checker


# =====================================
# Shortcuts
# =====================================

# Admin-level: ADMIN or MODERATOR
require_admin = require_role_or_higher(Role.MODERATOR, detail="Admin access required")


def require_super_admin(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> User:
    """ADMIN only. Used for account management."""
    if current_user.role != Role.ADMIN:
        raise _deny(request, current_user, "This action requires administrator privileges")
    return current_user


require_case_author = require_role(
    Role.JOURNALIST,
    Role.ADMIN,
    detail="Only journalists can create cases",
)

require_document_uploader = require_role(
    Role.JOURNALIST,
    Role.ADMIN,
    detail="Only journalists can upload documents",
)
