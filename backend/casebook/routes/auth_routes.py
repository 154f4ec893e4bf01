"""
Authentication Routes Module
============================

Handles:
- Self-registration (PUBLIC and JOURNALIST accounts)
- User login with account lockout protection
- Token refresh
- Logout (token invalidation)
- Current user lookup

Security Features:
- Account lockout handling
- Token version validation
- Rate limiting on login (see RateLimitMiddleware)
- Security logging
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from casebook.core.dependencies.auth import get_current_user
from casebook.core.exceptions import (
    AccountDisabledError,
    AccountLockedError,
    AuthenticationError,
    InvalidCredentialsError,
)
from casebook.core.logging import get_logger
from casebook.db.session import get_db
from casebook.models.user import User
from casebook.schemas import (
    ErrorResponse,
    LoginRequest,
    LogoutResponse,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    ValidationErrorResponse,
)
from casebook.services.auth_service import AuthService

logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"model": ErrorResponse, "description": "Authentication failed"},
        403: {"model": ErrorResponse, "description": "Access forbidden"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# =====================================
# Registration Endpoint
# =====================================

@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Account",
    description="""
    Create a PUBLIC or JOURNALIST account.

    Journalist accounts also receive a profile at ASSOCIATE tier with
    verification PENDING. Staff roles cannot be self-assigned.
    """,
    responses={
        201: {"description": "Account created"},
        400: {"model": ValidationErrorResponse, "description": "Invalid input or email taken"},
    },
)
def register(
    request: Request,
    register_data: RegisterRequest,
    db: Session = Depends(get_db),
) -> dict:
    """
    Register a new account.

    Args:
        request: FastAPI request object
        register_data: Email, password, optional name and role
        db: Database session

    Returns:
        Confirmation message and the created user

    Raises:
        EmailAlreadyExistsError: If the email is already registered
    """
    user = AuthService(db).register_user(
        email=register_data.email,
        password=register_data.password,
        name=register_data.name,
        role=register_data.role,
    )

    logger.info(
        "Account registered",
        extra={
            "user_id": str(user.id),
            "role": user.role.value,
            "ip_address": _client_ip(request),
        },
    )

    return {"message": "User created successfully", "user": user.to_dict()}


# =====================================
# Login Endpoint
# =====================================

@router.post(
    "/login",
    response_model=TokenResponse,
    summary="User Login",
    description="""
    Authenticate user with email and password.

    Returns JWT access and refresh tokens on success.

    Security features:
    - Account locks after repeated failed attempts
    - Rate limited per IP
    - All attempts are logged
    """,
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account locked or disabled"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
)
def login(
    request: Request,
    login_data: LoginRequest,
    db: Session = Depends(get_db),
) -> dict:
    """
    Authenticate user and return JWT tokens.

    Args:
        request: FastAPI request object
        login_data: Login credentials
        db: Database session

    Returns:
        Token response with access and refresh tokens

    Raises:
        HTTPException: On authentication failure
    """
    auth_service = AuthService(db)
    client_ip = _client_ip(request)

    try:
        user, tokens = auth_service.authenticate_user(
            email=login_data.email,
            password=login_data.password,
            ip_address=client_ip,
            user_agent=request.headers.get("user-agent"),
        )

        logger.info(
            "User logged in successfully",
            extra={
                "user_id": str(user.id),
                "role": user.role.value,
                "ip_address": client_ip,
            },
        )

        return tokens

    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    except AccountLockedError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is locked due to multiple failed login attempts. "
                   "Please contact an administrator.",
        )

    except AccountDisabledError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account has been disabled. Please contact an administrator.",
        )


# =====================================
# Refresh Token Endpoint
# =====================================

@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh Access Token",
    description="""
    Refresh access token using a valid refresh token.

    Returns new access and refresh tokens.
    """,
    responses={
        200: {"description": "Tokens refreshed successfully"},
        401: {"model": ErrorResponse, "description": "Invalid or expired token"},
        403: {"model": ErrorResponse, "description": "Account locked or disabled"},
    },
)
def refresh_token(
    request: Request,
    refresh_data: RefreshTokenRequest,
    db: Session = Depends(get_db),
) -> dict:
    """
    Refresh JWT tokens using a valid refresh token.

    Raises:
        HTTPException: On invalid token or account issues
    """
    auth_service = AuthService(db)

    try:
        return auth_service.refresh_tokens(refresh_data.refresh_token)

    except AuthenticationError as e:
        logger.warning(
            "Token refresh failed",
            extra={
                "reason": e.message,
                "ip_address": _client_ip(request),
            },
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    except AccountLockedError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is locked",
        )

    except AccountDisabledError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account has been disabled",
        )


# =====================================
# Logout Endpoint
# =====================================

@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="User Logout",
    description="""
    Logout the current user by invalidating all tokens.

    This increments the user's token version, making all
    existing tokens invalid.
    """,
    responses={
        200: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
def logout(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    AuthService(db).logout(current_user)

    logger.info(
        "User logged out",
        extra={
            "user_id": str(current_user.id),
            "ip_address": _client_ip(request),
        },
    )

    return {"message": "Successfully logged out"}


# =====================================
# Verify Token Endpoint
# =====================================

@router.get(
    "/verify",
    summary="Verify Token",
    description="Verify that the current access token is valid.",
    responses={
        200: {"description": "Token is valid"},
        401: {"model": ErrorResponse, "description": "Invalid token"},
    },
)
def verify_token(
    current_user: User = Depends(get_current_user),
) -> dict:
    """
    Verify that the current access token is valid.

    Returns:
        User info if token is valid
    """
    profile_id = current_user.journalist_profile_id
    return {
        "valid": True,
        "user_id": str(current_user.id),
        "email": current_user.email,
        "name": current_user.name,
        "role": current_user.role.value,
        "journalist_profile_id": str(profile_id) if profile_id else None,
    }


# =====================================
# Get Current User Endpoint
# =====================================

@router.get(
    "/me",
    summary="Get Current User",
    description="Get the currently authenticated user's information.",
    responses={
        200: {"description": "Current user info"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
def get_me(
    current_user: User = Depends(get_current_user),
) -> dict:
    """
    Get current user information, including the journalist profile id
    when the account has one.
    """
    return current_user.to_dict()
