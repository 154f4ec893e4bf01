"""
Centralized Exception Handling Module
=====================================

Defines the application's exception hierarchy.

Every exception carries an HTTP status code and a details mapping so the
application-level handler can render a uniform ``{"message", "details"}``
response.

Usage:
    raise CaseNotFoundError(str(case_id))
    raise AccessDeniedError()
"""

from typing import Any, Dict, Optional
from fastapi import status


class CasebookException(Exception):
    """
    Base exception class for the Casebook application.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ==========================
# Authentication Exceptions
# ==========================

class AuthenticationError(CasebookException):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Could not validate credentials",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid."""

    def __init__(self):
        super().__init__(message="Invalid email or password")


class TokenExpiredError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, token_type: str = "access"):
        super().__init__(
            message=f"{token_type.capitalize()} token has expired",
            details={"token_type": token_type},
        )


class TokenInvalidError(AuthenticationError):
    """Raised when a JWT token is invalid."""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(
            message="Invalid token",
            details={"reason": reason},
        )


class TokenVersionMismatchError(AuthenticationError):
    """Raised when token version doesn't match user's current version."""

    def __init__(self):
        super().__init__(
            message="Token has been invalidated. Please log in again."
        )


# ==========================
# Authorization Exceptions
# ==========================

class AuthorizationError(CasebookException):
    """Raised when user lacks required permissions."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class AccessDeniedError(AuthorizationError):
    """Raised when a user may not see or change a specific resource."""

    def __init__(self, resource: Optional[str] = None):
        details = {"resource": resource} if resource else None
        super().__init__(message="Access denied", details=details)


class RoleNotAuthorizedError(AuthorizationError):
    """Raised when user's role is not authorized for the action."""

    def __init__(self, required_roles: list, message: str = "Your role is not authorized for this action"):
        super().__init__(
            message=message,
            details={"required_roles": required_roles},
        )


# ==========================
# Account Status Exceptions
# ==========================

class AccountError(CasebookException):
    """Base exception for account-related issues."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_403_FORBIDDEN,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            details=details,
        )


class AccountLockedError(AccountError):
    """Raised when account is locked due to failed attempts."""

    def __init__(self):
        super().__init__(
            message="Account is locked due to multiple failed login attempts. "
                    "Please contact an administrator."
        )


class AccountDisabledError(AccountError):
    """Raised when account is disabled."""

    def __init__(self):
        super().__init__(
            message="Account has been disabled. Please contact an administrator."
        )


# ==========================
# Resource Exceptions
# ==========================

class NotFoundError(CasebookException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", identifier: Optional[str] = None):
        message = f"{resource} not found"
        details = {"resource": resource}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class UserNotFoundError(NotFoundError):
    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="User", identifier=identifier)


class CaseNotFoundError(NotFoundError):
    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Case", identifier=identifier)


class DocumentNotFoundError(NotFoundError):
    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Document", identifier=identifier)


class JournalistProfileNotFoundError(NotFoundError):
    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Journalist profile", identifier=identifier)


class NotificationNotFoundError(NotFoundError):
    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Notification", identifier=identifier)


class SubscriptionNotFoundError(NotFoundError):
    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Subscription", identifier=identifier)


class StoredFileMissingError(NotFoundError):
    """Raised when a document record exists but its file is gone."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="File", identifier=identifier)
        self.message = "File not found on disk"


# ==========================
# Validation Exceptions
# ==========================

class ValidationError(CasebookException):
    """Raised when input is well-formed JSON but semantically invalid."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet requirements."""

    def __init__(self, requirements: list):
        super().__init__(
            message="Password does not meet security requirements",
            details={"requirements": requirements},
        )


class EmailAlreadyExistsError(ValidationError):
    """Raised when attempting to register with an existing email."""

    def __init__(self):
        super().__init__(message="User already exists")


class MissingFileError(ValidationError):
    def __init__(self):
        super().__init__(message="No file provided")


class FileTooLargeError(ValidationError):
    def __init__(self, max_size_mb: int):
        super().__init__(
            message=f"File exceeds the {max_size_mb} MB upload limit",
            details={"max_size_mb": max_size_mb},
        )


# ==========================
# Rate Limiting Exceptions
# ==========================

class RateLimitError(CasebookException):
    """Raised when rate limit is exceeded."""

    def __init__(self, retry_after: int = 60):
        super().__init__(
            message="Too many requests. Please try again later.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"retry_after_seconds": retry_after},
        )


class LoginRateLimitError(RateLimitError):
    """Raised when login rate limit is exceeded."""

    def __init__(self, retry_after: int = 60):
        super().__init__(retry_after=retry_after)
        self.message = "Too many login attempts. Please try again later."
