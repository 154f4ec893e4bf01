"""
Role-Based Access Control (RBAC) Unit Tests
============================================

Tests for RBAC functionality including:
- Role hierarchy
- Role level checking
- require_admin dependency (ADMIN, MODERATOR)
- require_super_admin dependency (ADMIN)
- require_case_author / require_document_uploader
"""

import pytest

from casebook.core.dependencies.rbac import (
    ROLE_HIERARCHY,
    get_role_level,
    has_role_or_higher,
)
from casebook.models.role_enum import Role


pytestmark = pytest.mark.rbac


class TestRoleHierarchy:
    """Tests for role hierarchy configuration."""

    def test_role_hierarchy_order(self):
        """Roles are ordered from least to most privileged."""
        # Assert
        assert ROLE_HIERARCHY == [
            Role.PUBLIC,
            Role.JOURNALIST,
            Role.MODERATOR,
            Role.ADMIN,
        ]

    def test_role_levels_are_ascending(self):
        # Act
        levels = [get_role_level(role) for role in (Role.PUBLIC, Role.JOURNALIST, Role.MODERATOR, Role.ADMIN)]

        # Assert
        assert levels == [0, 1, 2, 3]


class TestHasRoleOrHigher:
    """Tests for has_role_or_higher function."""

    def test_same_role_is_sufficient(self):
        # Act & Assert
        assert has_role_or_higher(Role.JOURNALIST, Role.JOURNALIST) is True

    def test_admin_has_all(self):
        # Act & Assert
        for role in ROLE_HIERARCHY:
            assert has_role_or_higher(Role.ADMIN, role)

    def test_public_does_not_have_journalist(self):
        # Act
        result = has_role_or_higher(Role.PUBLIC, Role.JOURNALIST)

        # Assert
        assert result is False

    def test_moderator_does_not_have_admin(self):
        # Act
        result = has_role_or_higher(Role.MODERATOR, Role.ADMIN)

        # Assert
        assert result is False


class TestRequireAdmin:
    """Dashboard is open to ADMIN and MODERATOR only."""

    def test_admin_can_access_dashboard(self, client, admin_headers):
        # Act
        response = client.get("/api/admin/dashboard", headers=admin_headers)

        # Assert
        assert response.status_code == 200
        assert "overview" in response.json()

    def test_moderator_can_access_dashboard(self, client, moderator_headers):
        # Act
        response = client.get("/api/admin/dashboard", headers=moderator_headers)

        # Assert
        assert response.status_code == 200

    def test_journalist_cannot_access_dashboard(self, client, journalist_headers):
        # Act
        response = client.get("/api/admin/dashboard", headers=journalist_headers)

        # Assert
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_public_user_cannot_access_dashboard(self, client, public_headers):
        # Act
        response = client.get("/api/admin/dashboard", headers=public_headers)

        # Assert
        assert response.status_code == 403

    def test_unauthenticated_cannot_access_dashboard(self, client):
        # Act
        response = client.get("/api/admin/dashboard")

        # Assert
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestRequireSuperAdmin:
    """Account management is ADMIN only."""

    def test_admin_can_list_users(self, client, admin_headers):
        # Act
        response = client.get("/api/admin/users", headers=admin_headers)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert "users" in data
        assert "pagination" in data

    def test_moderator_cannot_list_users(self, client, moderator_headers):
        # Act
        response = client.get("/api/admin/users", headers=moderator_headers)

        # Assert
        assert response.status_code == 403


class TestRequireCaseAuthor:
    """Only journalists and admins may create cases or upload documents."""

    def test_public_user_cannot_create_case(self, client, public_headers):
        # Arrange
        payload = {"title": "A", "description": "B", "category": "C"}

        # Act
        response = client.post("/api/cases", json=payload, headers=public_headers)

        # Assert
        assert response.status_code == 403
        assert response.json()["detail"] == "Only journalists can create cases"

    def test_moderator_cannot_create_case(self, client, moderator_headers):
        # Arrange
        payload = {"title": "A", "description": "B", "category": "C"}

        # Act
        response = client.post("/api/cases", json=payload, headers=moderator_headers)

        # Assert
        assert response.status_code == 403

    def test_public_user_cannot_upload_document(self, client, public_headers):
        # Act
        response = client.post(
            "/api/documents",
            files={"file": ("a.txt", b"data", "text/plain")},
            data={"metadata": "{}"},
            headers=public_headers,
        )

        # Assert
        assert response.status_code == 403
        assert response.json()["detail"] == "Only journalists can upload documents"
