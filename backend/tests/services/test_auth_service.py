"""
Authentication Service Unit Tests
==================================

Tests for the AuthService class covering:
- Password hashing and verification
- Access and refresh token creation and validation
- Registration rules
- User authentication flow and account lockout
- Token version validation
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt
from sqlalchemy.orm import Session

from casebook.core.config import settings
from casebook.core.enums import VerificationStatus
from casebook.core.exceptions import (
    AccountDisabledError,
    AccountLockedError,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    PasswordValidationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenVersionMismatchError,
    ValidationError,
)
from casebook.models.role_enum import Role
from casebook.models.user import User
from casebook.services.auth_service import AuthService, TokenType


pytestmark = pytest.mark.unit


class TestPasswordHashing:
    """Tests for password hashing functionality."""

    def test_hash_password_creates_different_hashes(self):
        """Test that same password creates different hashes (salt)."""
        # Act
        first = AuthService.hash_password("TestPassword123!")
        second = AuthService.hash_password("TestPassword123!")

        # Assert
        assert first != second
        assert first.startswith("$argon2")

    def test_verify_password(self):
        # Arrange
        hashed = AuthService.hash_password("TestPassword123!")

        # Act & Assert
        assert AuthService.verify_password("TestPassword123!", hashed) is True
        assert AuthService.verify_password("WrongPassword123!", hashed) is False

    def test_verify_password_with_garbage_hash(self):
        # Act & Assert
        assert AuthService.verify_password("TestPassword123!", "not-a-hash") is False


class TestTokens:
    def test_access_token_claims(self, public_user: User):
        # Act
        token = AuthService.create_access_token(public_user)
        payload = AuthService.decode_token(token, expected_type=TokenType.ACCESS)

        # Assert
        assert payload["sub"] == str(public_user.id)
        assert payload["role"] == "PUBLIC"
        assert payload["type"] == TokenType.ACCESS
        assert payload["token_version"] == public_user.token_version
        assert payload["iss"] == settings.ISSUER

    def test_refresh_token_rejected_as_access(self, public_user: User):
        # Arrange
        token = AuthService.create_refresh_token(public_user)

        # Act & Assert
        with pytest.raises(TokenInvalidError):
            AuthService.decode_token(token, expected_type=TokenType.ACCESS)

    def test_expired_token(self, public_user: User):
        # Arrange
        token = AuthService.create_access_token(public_user, expires_delta=timedelta(seconds=-1))

        # Act & Assert
        with pytest.raises(TokenExpiredError):
            AuthService.decode_token(token, expected_type=TokenType.ACCESS)

    def test_wrong_audience(self, public_user: User):
        # Arrange
        token = jwt.encode(
            {"sub": str(public_user.id), "aud": "someone-else", "iss": settings.ISSUER, "type": "access"},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )

        # Act & Assert
        with pytest.raises(TokenInvalidError):
            AuthService.decode_token(token)

    def test_validate_access_token_returns_user(self, db_session: Session, journalist_user: User):
        # Act
        user = AuthService(db_session).validate_access_token(AuthService.create_access_token(journalist_user))

        # Assert
        assert user.id == journalist_user.id

    def test_unknown_user(self, db_session: Session, public_user: User):
        # Arrange
        token = AuthService.create_access_token(public_user)
        db_session.delete(public_user)
        db_session.commit()

        # Act & Assert
        with pytest.raises(TokenInvalidError):
            AuthService(db_session).validate_access_token(token)

    def test_token_version_mismatch_after_logout(self, db_session: Session, public_user: User):
        # Arrange
        service = AuthService(db_session)
        token = AuthService.create_access_token(public_user)
        service.logout(public_user)

        # Act & Assert
        with pytest.raises(TokenVersionMismatchError):
            service.validate_access_token(token)

    def test_refresh_issues_new_pair(self, db_session: Session, public_user: User):
        # Act
        tokens = AuthService(db_session).refresh_tokens(AuthService.create_refresh_token(public_user))

        # Assert
        assert set(tokens) == {"access_token", "refresh_token", "token_type", "expires_in"}

    def test_refresh_after_logout_fails(self, db_session: Session, public_user: User):
        # Arrange
        service = AuthService(db_session)
        refresh_token = AuthService.create_refresh_token(public_user)
        service.logout(public_user)

        # Act & Assert
        with pytest.raises(TokenVersionMismatchError):
            service.refresh_tokens(refresh_token)


class TestRegistration:
    def test_register_public(self, db_session: Session):
        # Act
        user = AuthService(db_session).register_user("  Someone@Example.org ", "TestPassword123!", name="Someone")

        # Assert
        assert user.email == "someone@example.org"
        assert user.role == Role.PUBLIC
        assert user.journalist_profile is None

    def test_register_journalist_creates_profile(self, db_session: Session):
        # Act
        user = AuthService(db_session).register_user("cub@example.org", "TestPassword123!", role=Role.JOURNALIST)

        # Assert
        assert user.journalist_profile.verification_status == VerificationStatus.PENDING

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.MODERATOR])
    def test_staff_roles_cannot_self_register(self, db_session: Session, role: Role):
        # Act & Assert
        with pytest.raises(ValidationError):
            AuthService(db_session).register_user("staff@example.org", "TestPassword123!", role=role)

    def test_weak_password(self, db_session: Session):
        # Act & Assert
        with pytest.raises(PasswordValidationError) as exc_info:
            AuthService(db_session).register_user("weak@example.org", "password")
        assert "Password must contain at least one uppercase letter" in exc_info.value.details["requirements"]

    def test_duplicate_email_is_case_insensitive(self, db_session: Session, public_user: User):
        # Act & Assert
        with pytest.raises(EmailAlreadyExistsError):
            AuthService(db_session).register_user("READER@example.org", "TestPassword123!")


class TestAuthenticateUser:
    def test_success_returns_tokens(self, db_session: Session, public_user: User, test_password: str):
        # Act
        user, tokens = AuthService(db_session).authenticate_user(public_user.email, test_password)

        # Assert
        assert user.id == public_user.id
        assert tokens["token_type"] == "bearer"

    def test_unknown_email(self, db_session: Session, test_password: str):
        # Act & Assert
        with pytest.raises(InvalidCredentialsError):
            AuthService(db_session).authenticate_user(f"{uuid4()}@example.org", test_password)

    def test_wrong_password_counts_attempt(self, db_session: Session, public_user: User):
        # Act
        with pytest.raises(InvalidCredentialsError):
            AuthService(db_session).authenticate_user(public_user.email, "WrongPass1!")

        # Assert
        assert public_user.failed_attempts == 1

    def test_lockout_after_max_attempts(self, db_session: Session, public_user: User, test_password: str):
        # Arrange
        service = AuthService(db_session)
        for _ in range(settings.MAX_LOGIN_ATTEMPTS):
            with pytest.raises(InvalidCredentialsError):
                service.authenticate_user(public_user.email, "WrongPass1!")

        # Act & Assert
        with pytest.raises(AccountLockedError):
            service.authenticate_user(public_user.email, test_password)

    def test_disabled_account(self, db_session: Session, inactive_user: User, test_password: str):
        # Act & Assert
        with pytest.raises(AccountDisabledError):
            AuthService(db_session).authenticate_user(inactive_user.email, test_password)
