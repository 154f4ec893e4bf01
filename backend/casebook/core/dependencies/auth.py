"""
Authentication Dependencies Module
==================================

FastAPI dependencies for authentication and user extraction.

Usage:
    @router.get("/protected")
    def protected_route(user: User = Depends(get_current_user)):
        return {"user": user.email}
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from casebook.core.exceptions import (
    AccountDisabledError,
    AccountLockedError,
    AuthenticationError,
    TokenExpiredError,
    TokenVersionMismatchError,
)
from casebook.core.logging import get_logger, security_logger, user_id_context
from casebook.db.session import get_db
from casebook.models.user import User
from casebook.services.auth_service import AuthService

logger = get_logger(__name__)


# =====================================
# OAuth2 Schemes
# =====================================

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/auth/login",
    auto_error=True,
    description="Bearer access token issued by /auth/login",
)


class OptionalOAuth2PasswordBearer(OAuth2PasswordBearer):
    """OAuth2 scheme that yields None instead of failing when no token is sent."""

    async def __call__(self, request: Request) -> Optional[str]:
        try:
            return await super().__call__(request)
        except HTTPException:
            return None


optional_oauth2_scheme = OptionalOAuth2PasswordBearer(
    tokenUrl="/auth/login",
    auto_error=False,
)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _bind_user(request: Request, user: User) -> None:
    request.state.user_id = str(user.id)
    user_id_context.set(str(user.id))


# =====================================
# Get Current User
# =====================================

def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate the bearer token and return the current user.

    Security checks performed:
    - Token signature, issuer and audience
    - Token expiration
    - Token type (must be access)
    - Token version (revocation on logout)
    - Account status (locked/disabled)

    Raises:
        HTTPException: 401 for token problems, 403 for account status
    """
    auth_service = AuthService(db)

    try:
        user = auth_service.validate_access_token(token)
    except TokenVersionMismatchError:
        security_logger.log_token_invalid(reason="token_version_mismatch", ip_address=_client_ip(request))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been invalidated. Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except TokenExpiredError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except AuthenticationError as e:
        logger.warning("Invalid token presented", extra={"reason": e.message})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except AccountLockedError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is locked. Please contact an administrator.",
        )
    except AccountDisabledError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account has been disabled. Please contact an administrator.",
        )

    _bind_user(request, user)
    return user


# =====================================
# Get Current User (Optional)
# =====================================

def get_current_user_optional(
    request: Request,
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Current user if a valid token was sent, otherwise None.

    Used by public endpoints whose results widen for signed-in users
    (case listing and detail). A bad token degrades to anonymous.
    """
    if token is None:
        return None

    try:
        user = AuthService(db).validate_access_token(token)
    except (AuthenticationError, AccountLockedError, AccountDisabledError) as e:
        logger.info("Ignoring unusable token on public endpoint", extra={"reason": e.message})
        return None

    _bind_user(request, user)
    return user
