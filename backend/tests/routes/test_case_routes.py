"""
Case Routes Integration Tests
=============================

Integration tests for /api/cases including:
- Listing and detail visibility per caller
- Create, update (publish transition) and delete
- Timeline, sources, authorities, updates and comments
- Follow / unfollow
"""

import re

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from casebook.core.enums import NotificationType
from casebook.models.case import Case, CaseSubscription
from casebook.models.notification import EmailQueue, EmailSubscription, Notification
from casebook.models.role_enum import Role
from casebook.models.user import User


pytestmark = pytest.mark.integration

SUFFIXED_SLUG = re.compile(r"^[a-z0-9-]+-[a-z0-9]{6}$")

NEW_CASE = {
    "title": "Missing Funds in Rural Road Scheme",
    "description": "Tracking disbursement of road scheme funds.",
    "category": "Corruption",
    "tags": "roads,funds",
    "priority": "HIGH",
}


def _slugs(response) -> set:
    return {case["slug"] for case in response.json()["cases"]}


class TestListCases:
    """Listing is public; what is listed depends on the caller."""

    def test_anonymous_sees_public_cases_only(self, client: TestClient, public_case, private_case):
        # Act
        response = client.get("/api/cases")

        # Assert
        assert response.status_code == 200
        assert _slugs(response) == {"public-road-fund-diversion"}

    def test_public_user_sees_public_cases_only(self, client: TestClient, public_case, private_case, public_headers):
        # Act
        response = client.get("/api/cases", headers=public_headers)

        # Assert
        assert _slugs(response) == {"public-road-fund-diversion"}

    def test_owner_sees_own_drafts(self, client: TestClient, public_case, private_case, journalist_headers):
        # Act
        response = client.get("/api/cases", headers=journalist_headers)

        # Assert
        assert _slugs(response) == {"public-road-fund-diversion", "private-hospital-tender"}

    def test_other_journalist_does_not_see_drafts(
        self, client: TestClient, public_case, private_case, other_journalist_headers
    ):
        # Act
        response = client.get("/api/cases", headers=other_journalist_headers)

        # Assert
        assert _slugs(response) == {"public-road-fund-diversion"}

    def test_admin_sees_everything(self, client: TestClient, public_case, private_case, admin_headers):
        # Act
        response = client.get("/api/cases", headers=admin_headers)

        # Assert
        assert _slugs(response) == {"public-road-fund-diversion", "private-hospital-tender"}

    def test_pagination_envelope(self, client: TestClient, make_case, journalist_user):
        # Arrange
        for i in range(3):
            make_case(journalist_user, title=f"Case {i}", is_public=True)

        # Act
        response = client.get("/api/cases", params={"page": 2, "limit": 2})

        # Assert
        data = response.json()
        assert len(data["cases"]) == 1
        assert data["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}

    def test_search_is_combined_with_visibility(self, client: TestClient, public_case, private_case):
        # Act
        response = client.get("/api/cases", params={"search": "hospital"})

        # Assert
        assert response.json()["cases"] == []

    def test_search_matches_title_case_insensitively(self, client: TestClient, public_case):
        # Act
        response = client.get("/api/cases", params={"search": "ROAD FUND"})

        # Assert
        assert _slugs(response) == {"public-road-fund-diversion"}

    def test_filter_by_status(self, client: TestClient, public_case, private_case, admin_headers):
        # Act
        response = client.get("/api/cases", params={"status": "DRAFT"}, headers=admin_headers)

        # Assert
        assert _slugs(response) == {"private-hospital-tender"}

    def test_list_items_carry_journalist_and_counts(self, client: TestClient, public_case):
        # Act
        item = client.get("/api/cases").json()["cases"][0]

        # Assert
        assert item["journalist"]["user"]["name"] == "Asha Reporter"
        assert item["counts"] == {"documents": 0, "comments": 0, "updates": 0}


class TestGetCase:
    def test_anonymous_gets_public_case(self, client: TestClient, public_case):
        # Act
        response = client.get(f"/api/cases/{public_case.id}")

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["slug"] == public_case.slug
        for key in ("timeline", "documents", "sources", "authorities", "updates", "comments"):
            assert data[key] == []

    def test_anonymous_denied_private_case(self, client: TestClient, private_case):
        # Act
        response = client.get(f"/api/cases/{private_case.id}")

        # Assert
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied"

    def test_other_journalist_denied_private_case(self, client: TestClient, private_case, other_journalist_headers):
        # Act
        response = client.get(f"/api/cases/{private_case.id}", headers=other_journalist_headers)

        # Assert
        assert response.status_code == 403

    def test_owner_gets_private_case(self, client: TestClient, private_case, journalist_headers):
        # Act
        response = client.get(f"/api/cases/{private_case.id}", headers=journalist_headers)

        # Assert
        assert response.status_code == 200

    def test_demoted_owner_denied_private_case(
        self, client: TestClient, db_session: Session, private_case, journalist_user: User, journalist_headers
    ):
        # Arrange
        journalist_user.role = Role.PUBLIC
        db_session.commit()

        # Act
        detail = client.get(f"/api/cases/{private_case.id}", headers=journalist_headers)
        update = client.put(
            f"/api/cases/{private_case.id}",
            json={"title": "Still mine", "is_public": True},
            headers=journalist_headers,
        )

        # Assert
        assert detail.status_code == 403
        assert update.status_code == 403
        assert private_case.title == "Private Hospital Tender"

    def test_moderator_gets_private_case(self, client: TestClient, private_case, moderator_headers):
        # Act
        response = client.get(f"/api/cases/{private_case.id}", headers=moderator_headers)

        # Assert
        assert response.status_code == 200

    def test_get_by_slug(self, client: TestClient, public_case):
        # Act
        response = client.get("/api/cases/by-slug/public-road-fund-diversion")

        # Assert
        assert response.status_code == 200
        assert response.json()["id"] == str(public_case.id)

    def test_unknown_case_is_404(self, client: TestClient):
        # Act
        response = client.get("/api/cases/00000000-0000-0000-0000-000000000000")

        # Assert
        assert response.status_code == 404

    def test_malformed_id_is_400(self, client: TestClient):
        # Act
        response = client.get("/api/cases/not-a-uuid")

        # Assert
        assert response.status_code == 400


class TestCreateCase:
    def test_journalist_creates_draft(self, client: TestClient, journalist_user: User, journalist_headers):
        # Act
        response = client.post("/api/cases", json=NEW_CASE, headers=journalist_headers)

        # Assert
        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "missing-funds-in-rural-road-scheme"
        assert data["status"] == "DRAFT"
        assert data["priority"] == "HIGH"
        assert data["journalist_id"] == str(journalist_user.journalist_profile.id)
        assert data["published_at"] is None

    def test_slug_collision_gets_suffix(self, client: TestClient, journalist_headers):
        # Arrange
        first = client.post("/api/cases", json=NEW_CASE, headers=journalist_headers).json()

        # Act
        second = client.post("/api/cases", json=NEW_CASE, headers=journalist_headers).json()

        # Assert
        assert first["slug"] == "missing-funds-in-rural-road-scheme"
        assert second["slug"] != first["slug"]
        assert second["slug"].startswith("missing-funds-in-rural-road-scheme-")
        assert SUFFIXED_SLUG.match(second["slug"])

    def test_admin_can_create_case(self, client: TestClient, admin_headers):
        # Act
        response = client.post("/api/cases", json=NEW_CASE, headers=admin_headers)

        # Assert
        assert response.status_code == 201
        assert response.json()["journalist_id"] is None

    def test_missing_fields_rejected(self, client: TestClient, journalist_headers):
        # Act
        response = client.post("/api/cases", json={"title": "Only a title"}, headers=journalist_headers)

        # Assert
        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["details"]["errors"]}
        assert {"body.description", "body.category"} <= fields

    def test_anonymous_cannot_create(self, client: TestClient):
        # Act
        response = client.post("/api/cases", json=NEW_CASE)

        # Assert
        assert response.status_code == 401

    def test_public_case_notifies_staff(
        self, client: TestClient, db_session: Session, journalist_headers, moderator_user
    ):
        # Act
        client.post("/api/cases", json={**NEW_CASE, "is_public": True}, headers=journalist_headers)

        # Assert
        notification = db_session.query(Notification).filter(Notification.user_id == moderator_user.id).one()
        assert notification.type == NotificationType.CASE_PUBLISHED
        assert notification.title.startswith("New Case Published:")


class TestUpdateCase:
    def test_owner_updates_fields(self, client: TestClient, private_case, journalist_headers):
        # Act
        response = client.put(
            f"/api/cases/{private_case.id}",
            json={"location": "Patna", "priority": "URGENT"},
            headers=journalist_headers,
        )

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["location"] == "Patna"
        assert data["priority"] == "URGENT"
        assert data["slug"] == "private-hospital-tender"

    def test_title_change_regenerates_slug(self, client: TestClient, private_case, journalist_headers):
        # Act
        response = client.put(
            f"/api/cases/{private_case.id}",
            json={"title": "District Hospital Tender Scam"},
            headers=journalist_headers,
        )

        # Assert
        assert response.json()["slug"] == "district-hospital-tender-scam"

    def test_first_publish_sets_published_at(self, client: TestClient, private_case, journalist_headers):
        # Act
        response = client.put(
            f"/api/cases/{private_case.id}",
            json={"status": "PUBLISHED"},
            headers=journalist_headers,
        )

        # Assert
        assert response.json()["status"] == "PUBLISHED"
        assert response.json()["published_at"] is not None

    def test_republish_keeps_original_published_at(self, client: TestClient, private_case, journalist_headers):
        # Arrange
        url = f"/api/cases/{private_case.id}"
        first = client.put(url, json={"status": "PUBLISHED"}, headers=journalist_headers).json()["published_at"]
        client.put(url, json={"status": "ARCHIVED"}, headers=journalist_headers)

        # Act
        again = client.put(url, json={"status": "PUBLISHED"}, headers=journalist_headers).json()

        # Assert
        assert again["status"] == "PUBLISHED"
        assert again["published_at"] == first

    def test_non_publish_update_leaves_published_at_unset(self, client: TestClient, private_case, journalist_headers):
        # Act
        response = client.put(
            f"/api/cases/{private_case.id}",
            json={"status": "IN_PROGRESS"},
            headers=journalist_headers,
        )

        # Assert
        assert response.json()["published_at"] is None

    def test_publish_notifies_followers(
        self, client: TestClient, db_session: Session, private_case, public_user, journalist_headers
    ):
        # Arrange
        db_session.add(CaseSubscription(case_id=private_case.id, user_id=public_user.id))
        db_session.add(EmailSubscription(user_id=public_user.id, email=public_user.email))
        db_session.commit()

        # Act
        client.put(f"/api/cases/{private_case.id}", json={"status": "PUBLISHED"}, headers=journalist_headers)

        # Assert
        notification = db_session.query(Notification).filter(Notification.user_id == public_user.id).one()
        assert notification.type == NotificationType.CASE_PUBLISHED
        email = db_session.query(EmailQueue).one()
        assert email.to_address == public_user.email

    def test_other_journalist_cannot_update(self, client: TestClient, public_case, other_journalist_headers):
        # Act
        response = client.put(
            f"/api/cases/{public_case.id}",
            json={"title": "Hijacked"},
            headers=other_journalist_headers,
        )

        # Assert
        assert response.status_code == 403

    def test_moderator_can_update(self, client: TestClient, public_case, moderator_headers):
        # Act
        response = client.put(
            f"/api/cases/{public_case.id}",
            json={"status": "UNDER_REVIEW"},
            headers=moderator_headers,
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["status"] == "UNDER_REVIEW"


class TestDeleteCase:
    def test_owner_deletes_case(self, client: TestClient, db_session: Session, private_case, journalist_headers):
        # Arrange
        case_id = private_case.id

        # Act
        response = client.delete(f"/api/cases/{case_id}", headers=journalist_headers)

        # Assert
        assert response.status_code == 200
        assert response.json()["message"] == "Case deleted successfully"
        db_session.expunge_all()
        assert db_session.get(Case, case_id) is None

    def test_public_user_cannot_delete(self, client: TestClient, public_case, public_headers):
        # Act
        response = client.delete(f"/api/cases/{public_case.id}", headers=public_headers)

        # Assert
        assert response.status_code == 403


class TestCaseChildren:
    def test_add_timeline_event(self, client: TestClient, public_case, journalist_headers):
        # Act
        response = client.post(
            f"/api/cases/{public_case.id}/timeline",
            json={"title": "Tender floated", "event_date": "2024-03-01T00:00:00Z", "event_type": "TENDER"},
            headers=journalist_headers,
        )

        # Assert
        assert response.status_code == 201
        assert response.json()["title"] == "Tender floated"
        detail = client.get(f"/api/cases/{public_case.id}").json()
        assert [event["title"] for event in detail["timeline"]] == ["Tender floated"]
        assert detail["counts"]["timeline"] == 1

    def test_add_source_validates_reliability(self, client: TestClient, public_case, journalist_headers):
        # Act
        response = client.post(
            f"/api/cases/{public_case.id}/sources",
            json={"name": "Clerk", "reliability": 9},
            headers=journalist_headers,
        )

        # Assert
        assert response.status_code == 400

    def test_add_source(self, client: TestClient, public_case, journalist_headers):
        # Act
        response = client.post(
            f"/api/cases/{public_case.id}/sources",
            json={"name": "Clerk", "is_confidential": True, "reliability": 4},
            headers=journalist_headers,
        )

        # Assert
        assert response.status_code == 201
        assert response.json()["is_confidential"] is True

    def test_add_authority(self, client: TestClient, public_case, journalist_headers):
        # Act
        response = client.post(
            f"/api/cases/{public_case.id}/authorities",
            json={"name": "District Collector", "department": "Revenue"},
            headers=journalist_headers,
        )

        # Assert
        assert response.status_code == 201
        assert response.json()["department"] == "Revenue"

    def test_non_owner_cannot_add_children(self, client: TestClient, public_case, other_journalist_headers):
        # Act
        response = client.post(
            f"/api/cases/{public_case.id}/authorities",
            json={"name": "District Collector"},
            headers=other_journalist_headers,
        )

        # Assert
        assert response.status_code == 403

    def test_update_notifies_followers(
        self, client: TestClient, db_session: Session, public_case, public_user, journalist_headers
    ):
        # Arrange
        db_session.add(CaseSubscription(case_id=public_case.id, user_id=public_user.id))
        db_session.commit()

        # Act
        response = client.post(
            f"/api/cases/{public_case.id}/updates",
            json={"title": "RTI reply received", "content": "The department replied."},
            headers=journalist_headers,
        )

        # Assert
        assert response.status_code == 201
        notification = db_session.query(Notification).filter(Notification.user_id == public_user.id).one()
        assert notification.type == NotificationType.CASE_UPDATED
        assert notification.message == "RTI reply received"

    def test_comment_notifies_other_followers_only(
        self, client: TestClient, db_session: Session, public_case, public_user, journalist_user, public_headers
    ):
        # Arrange
        db_session.add_all([
            CaseSubscription(case_id=public_case.id, user_id=public_user.id),
            CaseSubscription(case_id=public_case.id, user_id=journalist_user.id),
        ])
        db_session.commit()

        # Act
        response = client.post(
            f"/api/cases/{public_case.id}/comments",
            json={"content": "  Great work  "},
            headers=public_headers,
        )

        # Assert
        assert response.status_code == 201
        assert response.json()["content"] == "Great work"
        recipients = {n.user_id for n in db_session.query(Notification).all()}
        assert recipients == {journalist_user.id}

    def test_cannot_comment_on_hidden_case(self, client: TestClient, private_case, public_headers):
        # Act
        response = client.post(
            f"/api/cases/{private_case.id}/comments",
            json={"content": "Hello"},
            headers=public_headers,
        )

        # Assert
        assert response.status_code == 403


class TestSubscriptions:
    def test_follow_and_unfollow(self, client: TestClient, db_session: Session, public_case, public_user, public_headers):
        # Act
        followed = client.post(f"/api/cases/{public_case.id}/subscribe", headers=public_headers)
        unfollowed = client.delete(f"/api/cases/{public_case.id}/subscribe", headers=public_headers)

        # Assert
        assert followed.status_code == 201
        assert followed.json()["message"] == "Subscribed to case"
        assert unfollowed.status_code == 200
        subscription = db_session.query(CaseSubscription).one()
        assert subscription.is_active is False

    def test_follow_twice_keeps_one_row(self, client: TestClient, db_session: Session, public_case, public_headers):
        # Act
        client.post(f"/api/cases/{public_case.id}/subscribe", headers=public_headers)
        client.delete(f"/api/cases/{public_case.id}/subscribe", headers=public_headers)
        client.post(f"/api/cases/{public_case.id}/subscribe", headers=public_headers)

        # Assert
        subscriptions = db_session.query(CaseSubscription).all()
        assert len(subscriptions) == 1
        assert subscriptions[0].is_active is True

    def test_unfollow_without_subscription_is_404(self, client: TestClient, public_case, public_headers):
        # Act
        response = client.delete(f"/api/cases/{public_case.id}/subscribe", headers=public_headers)

        # Assert
        assert response.status_code == 404

    def test_cannot_follow_hidden_case(self, client: TestClient, private_case, public_headers):
        # Act
        response = client.post(f"/api/cases/{private_case.id}/subscribe", headers=public_headers)

        # Assert
        assert response.status_code == 403
