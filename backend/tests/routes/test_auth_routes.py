"""
Authentication Routes Integration Tests
========================================

Integration tests for authentication endpoints including:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET /auth/verify
- GET /auth/me
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from casebook.core.enums import MembershipTier, VerificationStatus
from casebook.models.user import User
from casebook.services.auth_service import AuthService

DEFAULT_PASSWORD = "TestPassword123!"  # matches the user fixtures


pytestmark = pytest.mark.integration


class TestRegisterEndpoint:
    """Integration tests for POST /auth/register endpoint."""

    def test_register_public_user(self, client: TestClient):
        # Arrange
        payload = {"email": "New.Reader@Example.org", "password": DEFAULT_PASSWORD, "name": "New Reader"}

        # Act
        response = client.post("/auth/register", json=payload)

        # Assert
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User created successfully"
        assert data["user"]["email"] == "new.reader@example.org"
        assert data["user"]["role"] == "PUBLIC"
        assert data["user"]["journalist_profile_id"] is None
        assert "hashed_password" not in data["user"]

    def test_register_journalist_creates_pending_profile(self, client: TestClient, db_session: Session):
        """A JOURNALIST registration creates an ASSOCIATE profile pending verification."""
        # Arrange
        payload = {
            "email": "cub@example.org",
            "password": DEFAULT_PASSWORD,
            "name": "Cub Reporter",
            "role": "JOURNALIST",
        }

        # Act
        response = client.post("/auth/register", json=payload)

        # Assert
        assert response.status_code == 201
        assert response.json()["user"]["journalist_profile_id"] is not None

        user = db_session.query(User).filter(User.email == "cub@example.org").one()
        assert user.journalist_profile.verification_status == VerificationStatus.PENDING
        assert user.journalist_profile.membership_tier == MembershipTier.ASSOCIATE
        assert user.journalist_profile.is_verified is False

    def test_register_duplicate_email(self, client: TestClient, public_user: User):
        # Arrange
        payload = {"email": public_user.email, "password": DEFAULT_PASSWORD}

        # Act
        response = client.post("/auth/register", json=payload)

        # Assert
        assert response.status_code == 400
        assert response.json()["message"] == "User already exists"

    def test_register_weak_password(self, client: TestClient, weak_password: str):
        # Act
        response = client.post("/auth/register", json={"email": "weak@example.org", "password": weak_password})

        # Assert
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"

    def test_register_staff_role_rejected(self, client: TestClient):
        # Act
        response = client.post(
            "/auth/register",
            json={"email": "sneaky@example.org", "password": DEFAULT_PASSWORD, "role": "ADMIN"},
        )

        # Assert
        assert response.status_code == 400

    def test_registered_user_can_login(self, client: TestClient):
        # Arrange
        client.post("/auth/register", json={"email": "fresh@example.org", "password": DEFAULT_PASSWORD})

        # Act
        response = client.post("/auth/login", json={"email": "fresh@example.org", "password": DEFAULT_PASSWORD})

        # Assert
        assert response.status_code == 200


class TestLoginEndpoint:
    """Integration tests for POST /auth/login endpoint."""

    def test_login_success(self, client: TestClient, journalist_user: User):
        """Test successful login with valid credentials."""
        # Arrange
        login_data = {"email": journalist_user.email, "password": DEFAULT_PASSWORD}

        # Act
        response = client.post("/auth/login", json=login_data)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert "refresh_token" in data
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 15 * 60

    def test_login_unknown_email(self, client: TestClient):
        # Act
        response = client.post("/auth/login", json={"email": "ghost@example.org", "password": DEFAULT_PASSWORD})

        # Assert
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_login_invalid_password(self, client: TestClient, public_user: User):
        # Act
        response = client.post("/auth/login", json={"email": public_user.email, "password": "WrongPass1!"})

        # Assert
        assert response.status_code == 401

    def test_login_locked_account(self, client: TestClient, locked_user: User):
        # Act
        response = client.post("/auth/login", json={"email": locked_user.email, "password": DEFAULT_PASSWORD})

        # Assert
        assert response.status_code == 403
        assert "locked" in response.json()["detail"].lower()

    def test_login_disabled_account(self, client: TestClient, inactive_user: User):
        # Act
        response = client.post("/auth/login", json={"email": inactive_user.email, "password": DEFAULT_PASSWORD})

        # Assert
        assert response.status_code == 403
        assert "disabled" in response.json()["detail"].lower()

    def test_login_missing_fields(self, client: TestClient):
        # Act
        response = client.post("/auth/login", json={})

        # Assert
        assert response.status_code == 400

    def test_login_case_insensitive_email(self, client: TestClient, public_user: User):
        # Act
        response = client.post("/auth/login", json={"email": "READER@example.org", "password": DEFAULT_PASSWORD})

        # Assert
        assert response.status_code == 200

    def test_repeated_failures_lock_account(self, client: TestClient, db_session: Session, public_user: User):
        # Act
        for _ in range(5):
            client.post("/auth/login", json={"email": public_user.email, "password": "WrongPass1!"})
        response = client.post("/auth/login", json={"email": public_user.email, "password": DEFAULT_PASSWORD})

        # Assert
        db_session.refresh(public_user)
        assert public_user.is_locked is True
        assert response.status_code == 403

    def test_successful_login_resets_failed_attempts(self, client: TestClient, db_session: Session, public_user: User):
        # Arrange
        client.post("/auth/login", json={"email": public_user.email, "password": "WrongPass1!"})

        # Act
        client.post("/auth/login", json={"email": public_user.email, "password": DEFAULT_PASSWORD})

        # Assert
        db_session.refresh(public_user)
        assert public_user.failed_attempts == 0


class TestRefreshTokenEndpoint:
    """Integration tests for POST /auth/refresh endpoint."""

    def test_refresh_success(self, client: TestClient, public_user: User):
        # Arrange
        refresh_token = AuthService.create_refresh_token(public_user)

        # Act
        response = client.post("/auth/refresh", json={"refresh_token": refresh_token})

        # Assert
        assert response.status_code == 200
        assert "access_token" in response.json()

    def test_refresh_with_invalid_token(self, client: TestClient):
        # Act
        response = client.post("/auth/refresh", json={"refresh_token": "not.a.token"})

        # Assert
        assert response.status_code == 401

    def test_refresh_with_access_token_fails(self, client: TestClient, public_user: User):
        # Arrange
        access_token = AuthService.create_access_token(public_user)

        # Act
        response = client.post("/auth/refresh", json={"refresh_token": access_token})

        # Assert
        assert response.status_code == 401

    def test_refresh_locked_account(self, client: TestClient, locked_user: User):
        # Arrange
        refresh_token = AuthService.create_refresh_token(locked_user)

        # Act
        response = client.post("/auth/refresh", json={"refresh_token": refresh_token})

        # Assert
        assert response.status_code == 403


class TestLogoutEndpoint:
    """Integration tests for POST /auth/logout endpoint."""

    def test_logout_success(self, client: TestClient, public_headers: dict):
        # Act
        response = client.post("/auth/logout", headers=public_headers)

        # Assert
        assert response.status_code == 200
        assert response.json()["message"] == "Successfully logged out"

    def test_logout_without_auth(self, client: TestClient):
        # Act
        response = client.post("/auth/logout")

        # Assert
        assert response.status_code == 401

    def test_logout_invalidates_tokens(self, client: TestClient, public_headers: dict):
        # Arrange
        client.post("/auth/logout", headers=public_headers)

        # Act
        response = client.get("/auth/me", headers=public_headers)

        # Assert
        assert response.status_code == 401
        assert response.json()["detail"] == "Token has been invalidated. Please log in again."


class TestVerifyTokenEndpoint:
    """Integration tests for GET /auth/verify endpoint."""

    def test_verify_valid_token(self, client: TestClient, journalist_user: User, journalist_headers: dict):
        # Act
        response = client.get("/auth/verify", headers=journalist_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["role"] == "JOURNALIST"
        assert data["journalist_profile_id"] == str(journalist_user.journalist_profile.id)

    def test_verify_without_token(self, client: TestClient):
        # Act
        response = client.get("/auth/verify")

        # Assert
        assert response.status_code == 401


class TestMeEndpoint:
    """Integration tests for GET /auth/me endpoint."""

    def test_me_success(self, client: TestClient, public_user: User, public_headers: dict):
        # Act
        response = client.get("/auth/me", headers=public_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == public_user.email
        assert data["role"] == "PUBLIC"

    def test_me_disabled_account(self, client: TestClient, inactive_user: User, auth_for):
        # Act
        response = client.get("/auth/me", headers=auth_for(inactive_user))

        # Assert
        assert response.status_code == 403
