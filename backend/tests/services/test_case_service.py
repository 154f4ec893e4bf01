"""
Case Service Unit Tests
=======================
"""

import re
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from casebook.core.enums import CaseStatus
from casebook.core.exceptions import AccessDeniedError, CaseNotFoundError
from casebook.models.user import User
from casebook.schemas.case import CaseCreate, CaseUpdateRequest
from casebook.services.case_service import CaseService, random_suffix, slugify


pytestmark = pytest.mark.unit


class TestSlugify:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Missing Funds in Rural Road Scheme", "missing-funds-in-rural-road-scheme"),
            ("  Tender -- Fraud!!  ", "tender-fraud"),
            ("Ward 12: 2024 Budget", "ward-12-2024-budget"),
            ("!!!", "case"),
        ],
    )
    def test_slugify(self, title, expected):
        assert slugify(title) == expected

    def test_random_suffix_is_base36(self):
        assert re.fullmatch(r"[0-9a-z]{6}", random_suffix())


class TestGenerateSlug:
    def test_free_slug_used_as_is(self, db_session: Session):
        assert CaseService(db_session).generate_slug("Water Board Audit") == "water-board-audit"

    def test_taken_slug_gets_suffix(self, db_session: Session, make_case, journalist_user: User):
        # Arrange
        make_case(journalist_user, title="Water Board Audit", slug="water-board-audit")

        # Act
        slug = CaseService(db_session).generate_slug("Water Board Audit")

        # Assert
        assert re.fullmatch(r"water-board-audit-[0-9a-z]{6}", slug)

    def test_own_slug_not_counted_as_taken(self, db_session: Session, make_case, journalist_user: User):
        # Arrange
        case = make_case(journalist_user, title="Water Board Audit", slug="water-board-audit")

        # Act
        slug = CaseService(db_session).generate_slug("Water Board Audit", exclude_id=case.id)

        # Assert
        assert slug == "water-board-audit"


class TestCaseLifecycle:
    def test_create_always_draft(self, db_session: Session, journalist_user: User):
        # Act
        case = CaseService(db_session).create_case(
            journalist_user,
            CaseCreate(title="Canal Contract", description="Who got the canal contract", category="Contracts"),
        )

        # Assert
        assert case.status == CaseStatus.DRAFT
        assert case.journalist_id == journalist_user.journalist_profile.id

    def test_published_at_stamped_once(self, db_session: Session, journalist_user: User, private_case):
        # Arrange
        service = CaseService(db_session)

        # Act
        service.update_case(private_case.id, journalist_user, CaseUpdateRequest(status=CaseStatus.PUBLISHED))
        first = private_case.published_at
        service.update_case(private_case.id, journalist_user, CaseUpdateRequest(status=CaseStatus.ARCHIVED))
        service.update_case(private_case.id, journalist_user, CaseUpdateRequest(status=CaseStatus.PUBLISHED))

        # Assert
        assert first is not None
        assert private_case.published_at == first

    def test_nullable_fields_can_be_cleared(self, db_session: Session, journalist_user: User, make_case):
        # Arrange
        case = make_case(journalist_user, location="Pune", tags="roads")

        # Act
        CaseService(db_session).update_case(case.id, journalist_user, CaseUpdateRequest(location=None))

        # Assert
        assert case.location is None
        assert case.tags == "roads"

    def test_none_leaves_required_fields(self, db_session: Session, journalist_user: User, private_case):
        # Act
        CaseService(db_session).update_case(private_case.id, journalist_user, CaseUpdateRequest(title=None))

        # Assert
        assert private_case.title == "Private Hospital Tender"

    def test_non_owner_cannot_edit(self, db_session: Session, other_journalist: User, private_case):
        # Act & Assert
        with pytest.raises(AccessDeniedError):
            CaseService(db_session).get_editable(private_case.id, other_journalist)

    def test_hidden_case_not_visible_to_anonymous(self, db_session: Session, private_case):
        # Act & Assert
        with pytest.raises(AccessDeniedError):
            CaseService(db_session).get_visible(private_case.id, None)

    def test_unknown_case(self, db_session: Session, admin_user: User):
        # Act & Assert
        with pytest.raises(CaseNotFoundError):
            CaseService(db_session).delete_case(uuid4(), admin_user)
