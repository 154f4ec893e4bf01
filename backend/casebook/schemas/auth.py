"""
Authentication Schemas Module
=============================

Pydantic models for authentication request/response validation.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from casebook.models.role_enum import Role


def password_policy_violations(password: str) -> list[str]:
    """Return the password rules ``password`` breaks (empty when it is strong enough)."""
    errors = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one digit")
    if not re.search(r"[!@#$%^&*(),.?\":{}|<>_\-]", password):
        errors.append("Password must contain at least one special character")

    return errors


# ==========================
# Login Schemas
# ==========================

class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "reporter@example.org",
                "password": "SecureP@ss123",
            }
        }
    )


class TokenResponse(BaseModel):
    """Token response schema for login/refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: Optional[int] = Field(default=None, description="Access token expiration in seconds")


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="Valid refresh token")


class LogoutResponse(BaseModel):
    message: str = Field(default="Successfully logged out")


# ==========================
# Registration Schemas
# ==========================

class RegisterRequest(BaseModel):
    """
    Self-registration request.

    Only PUBLIC and JOURNALIST may be chosen; staff roles are granted
    by an administrator.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., max_length=128, description="User password")
    name: Optional[str] = Field(default=None, max_length=255, description="Display name")
    role: Role = Field(default=Role.PUBLIC, description="PUBLIC or JOURNALIST")

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        errors = password_policy_violations(v)
        if errors:
            raise ValueError("; ".join(errors))
        return v

    @field_validator("role")
    @classmethod
    def validate_self_assignable_role(cls, v: Role) -> Role:
        if v not in (Role.PUBLIC, Role.JOURNALIST):
            raise ValueError("Only PUBLIC or JOURNALIST accounts can be self-registered")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "reporter@example.org",
                "password": "SecureP@ss123",
                "name": "A. Reporter",
                "role": "JOURNALIST",
            }
        }
    )


class RegisterResponse(BaseModel):
    message: str = Field(default="User created successfully")
    user: dict = Field(..., description="Created user, without credentials")


# ==========================
# Error Schemas
# ==========================

class ErrorResponse(BaseModel):
    """Standard error response schema."""

    message: str = Field(..., description="Error message")
    details: Optional[dict] = Field(default=None, description="Additional error details")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Case not found",
                "details": {"resource": "Case"},
            }
        }
    )


class ValidationErrorDetail(BaseModel):
    field: str
    message: str
    type: str


class ValidationErrorResponse(BaseModel):
    """Body returned for malformed requests (HTTP 400)."""

    message: str = Field(default="Validation failed")
    details: dict = Field(..., description="{'errors': [ValidationErrorDetail, ...]}")
