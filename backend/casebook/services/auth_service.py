"""
Authentication Service Module
=============================

Consolidated authentication service handling:
- Account registration (PUBLIC or JOURNALIST)
- Password hashing using Argon2id
- JWT access and refresh tokens with type discrimination
- Token version tracking for forced logout
- Account lockout after repeated failures
"""

from datetime import datetime, timedelta, UTC
from typing import Optional, Tuple
from uuid import UUID

from argon2 import PasswordHasher
from argon2.exceptions import Argon2Error, InvalidHashError, VerifyMismatchError
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from casebook.core.config import settings
from casebook.core.enums import MembershipTier, VerificationStatus
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
from casebook.core.logging import get_logger, security_logger
from casebook.models.journalist import JournalistProfile
from casebook.models.role_enum import Role
from casebook.models.user import User
from casebook.schemas.auth import password_policy_violations

logger = get_logger(__name__)


# ==========================
# Password Hasher Configuration
# ==========================

ph = PasswordHasher(
    time_cost=settings.PASSWORD_HASH_TIME_COST,
    memory_cost=settings.PASSWORD_HASH_MEMORY_COST,
    parallelism=settings.PASSWORD_HASH_PARALLELISM,
    hash_len=32,
    salt_len=16,
)

SELF_REGISTRATION_ROLES = (Role.PUBLIC, Role.JOURNALIST)


class TokenType:
    """Token type constants for discrimination."""
    ACCESS = "access"
    REFRESH = "refresh"


class AuthService:
    """
    Authentication service handling all auth-related operations.

    Usage:
        auth_service = AuthService(db)
        user, tokens = auth_service.authenticate_user(email, password)
    """

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Password Utilities
    # --------------------------

    @staticmethod
    def hash_password(password: str) -> str:
        return ph.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise
        """
        try:
            ph.verify(hashed_password, plain_password)
            return True
        except VerifyMismatchError:
            return False
        except (Argon2Error, InvalidHashError) as e:
            logger.warning("Password verification error", extra={"error": str(e)})
            return False

    # --------------------------
    # Token Creation
    # --------------------------

    @staticmethod
    def _create_token(
        user: User,
        token_type: str,
        expires_delta: timedelta,
    ) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(user.id),
            "role": user.role.value,
            "token_version": user.token_version,
            "type": token_type,
            "exp": now + expires_delta,
            "iat": now,
            "iss": settings.ISSUER,
            "aud": settings.AUDIENCE,
        }
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @classmethod
    def create_access_token(cls, user: User, expires_delta: Optional[timedelta] = None) -> str:
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        return cls._create_token(user, TokenType.ACCESS, expires_delta)

    @classmethod
    def create_refresh_token(cls, user: User, expires_delta: Optional[timedelta] = None) -> str:
        if expires_delta is None:
            expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        return cls._create_token(user, TokenType.REFRESH, expires_delta)

    # --------------------------
    # Token Decoding & Validation
    # --------------------------

    @staticmethod
    def decode_token(token: str, expected_type: Optional[str] = None) -> dict:
        """
        Decode and validate a JWT token.

        Args:
            token: JWT token string
            expected_type: Expected token type (access/refresh)

        Returns:
            Decoded token payload

        Raises:
            TokenExpiredError: If token has expired
            TokenInvalidError: If token is invalid or of the wrong type
        """
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                issuer=settings.ISSUER,
                audience=settings.AUDIENCE,
            )
        except ExpiredSignatureError:
            raise TokenExpiredError(token_type=expected_type or "unknown")
        except JWTError as e:
            logger.warning("Token decode error", extra={"error": str(e)})
            raise TokenInvalidError(reason=str(e))

        if expected_type and payload.get("type") != expected_type:
            raise TokenInvalidError(
                reason=f"Expected {expected_type} token, got {payload.get('type')}"
            )
        return payload

    def get_tokens_for_user(self, user: User) -> dict:
        return {
            "access_token": self.create_access_token(user),
            "refresh_token": self.create_refresh_token(user),
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        }

    def _user_from_payload(self, payload: dict) -> User:
        user_id = payload.get("sub")
        token_version = payload.get("token_version")

        if not user_id or token_version is None:
            raise TokenInvalidError(reason="Invalid token payload")

        try:
            user_uuid = UUID(user_id)
        except ValueError:
            raise TokenInvalidError(reason="Invalid user ID format")

        user = self.db.get(User, user_uuid)
        if not user:
            raise TokenInvalidError(reason="User not found")

        if user.token_version != token_version:
            raise TokenVersionMismatchError()
        if user.is_locked:
            raise AccountLockedError()
        if not user.is_active:
            raise AccountDisabledError()

        return user

    # --------------------------
    # Registration
    # --------------------------

    def register_user(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: Role = Role.PUBLIC,
    ) -> User:
        """
        Create an account.

        Journalist accounts get a profile at ASSOCIATE tier, pending
        verification.

        Raises:
            ValidationError: If the role cannot be self-assigned
            PasswordValidationError: If the password is too weak
            EmailAlreadyExistsError: If the email is taken
        """
        if role not in SELF_REGISTRATION_ROLES:
            raise ValidationError(
                message="Role cannot be self-assigned",
                details={"allowed_roles": [r.value for r in SELF_REGISTRATION_ROLES]},
            )

        violations = password_policy_violations(password)
        if violations:
            raise PasswordValidationError(violations)

        email = email.strip().lower()
        if self.db.query(User).filter(User.email == email).first():
            raise EmailAlreadyExistsError()

        user = User(
            email=email,
            name=name,
            hashed_password=self.hash_password(password),
            role=role,
        )
        if role == Role.JOURNALIST:
            user.journalist_profile = JournalistProfile(
                membership_tier=MembershipTier.ASSOCIATE,
                verification_status=VerificationStatus.PENDING,
            )

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(
            "User registered",
            extra={"user_id": str(user.id), "role": user.role.value},
        )
        return user

    # --------------------------
    # Authentication Methods
    # --------------------------

    def authenticate_user(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[User, dict]:
        """
        Authenticate a user with email and password.

        Returns:
            Tuple of (User, tokens dict)

        Raises:
            InvalidCredentialsError: If credentials are invalid
            AccountLockedError: If account is locked
            AccountDisabledError: If account is disabled
        """
        ip_address = ip_address or "unknown"
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()

        if not user:
            security_logger.log_login_failure(email=email, ip_address=ip_address, reason="user_not_found")
            raise InvalidCredentialsError()

        if user.is_locked:
            security_logger.log_login_failure(email=email, ip_address=ip_address, reason="account_locked")
            raise AccountLockedError()

        if not user.is_active:
            security_logger.log_login_failure(email=email, ip_address=ip_address, reason="account_disabled")
            raise AccountDisabledError()

        if not self.verify_password(password, user.hashed_password):
            locked = user.increment_failed_attempts(settings.MAX_LOGIN_ATTEMPTS)
            self.db.commit()
            if locked:
                security_logger.log_account_locked(user_id=str(user.id), ip_address=ip_address)
            security_logger.log_login_failure(email=email, ip_address=ip_address, reason="invalid_password")
            raise InvalidCredentialsError()

        user.reset_failed_attempts()
        self.db.commit()

        tokens = self.get_tokens_for_user(user)
        security_logger.log_login_success(
            user_id=str(user.id),
            ip_address=ip_address,
            user_agent=user_agent or "unknown",
        )
        return user, tokens

    def refresh_tokens(self, refresh_token: str) -> dict:
        """
        Issue a new token pair from a valid refresh token.

        Raises:
            TokenInvalidError: If token is invalid
            TokenVersionMismatchError: If the user logged out since issue
            AccountLockedError: If account is locked
            AccountDisabledError: If account is disabled
        """
        payload = self.decode_token(refresh_token, expected_type=TokenType.REFRESH)
        try:
            user = self._user_from_payload(payload)
        except TokenVersionMismatchError:
            security_logger.log_token_invalid(reason="token_version_mismatch", ip_address="unknown")
            raise

        tokens = self.get_tokens_for_user(user)
        security_logger.log_token_refresh(user_id=str(user.id))
        return tokens

    def logout(self, user: User) -> None:
        """Invalidate every outstanding token of the user."""
        user.invalidate_tokens()
        self.db.commit()
        security_logger.log_logout(user_id=str(user.id))

    def validate_access_token(self, token: str) -> User:
        """
        Validate an access token and return the user.

        Raises:
            TokenInvalidError: If token is invalid
            TokenVersionMismatchError: If token version doesn't match
            AccountLockedError: If account is locked
            AccountDisabledError: If account is disabled
        """
        payload = self.decode_token(token, expected_type=TokenType.ACCESS)
        return self._user_from_payload(payload)
