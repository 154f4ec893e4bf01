"""
Schemas Package Initialization
==============================

Exports all Pydantic schemas for the application.

Usage:
    from casebook.schemas import LoginRequest, CaseCreate, Pagination
"""

# Auth schemas
from casebook.schemas.auth import (
    ErrorResponse,
    LoginRequest,
    LogoutResponse,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    ValidationErrorResponse,
)

# User schemas
from casebook.schemas.user import (
    AccountUnlockResponse,
    CurrentUserResponse,
    UserResponse,
    UserUpdate,
)

# Shared
from casebook.schemas.common import MessageResponse, Pagination

# Domain schemas
from casebook.schemas.case import (
    AuthorityCreate,
    CaseCreate,
    CaseUpdateCreate,
    CaseUpdateRequest,
    CommentCreate,
    SourceCreate,
    TimelineEventCreate,
)
from casebook.schemas.document import DocumentMetadata, DocumentUpdate
from casebook.schemas.journalist import (
    JournalistAdminUpdate,
    JournalistProfileUpdate,
    PublicationCreate,
)
from casebook.schemas.notification import (
    EmailSubscriptionRequest,
    EmailSubscriptionStatus,
    NotificationCreate,
)
from casebook.schemas.verification import VerificationCreate

__all__ = [
    # Auth
    "LoginRequest",
    "TokenResponse",
    "RefreshTokenRequest",
    "LogoutResponse",
    "RegisterRequest",
    "RegisterResponse",
    "ErrorResponse",
    "ValidationErrorResponse",
    # User
    "UserUpdate",
    "UserResponse",
    "CurrentUserResponse",
    "AccountUnlockResponse",
    # Shared
    "Pagination",
    "MessageResponse",
    # Cases
    "CaseCreate",
    "CaseUpdateRequest",
    "TimelineEventCreate",
    "SourceCreate",
    "AuthorityCreate",
    "CaseUpdateCreate",
    "CommentCreate",
    # Documents
    "DocumentMetadata",
    "DocumentUpdate",
    # Journalists
    "JournalistProfileUpdate",
    "PublicationCreate",
    "JournalistAdminUpdate",
    # Notifications
    "NotificationCreate",
    "EmailSubscriptionRequest",
    "EmailSubscriptionStatus",
    # Verifications
    "VerificationCreate",
]
