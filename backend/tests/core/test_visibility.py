"""
Visibility Policy Tests
=======================

Tests for who may see and change cases, documents and verifications:
- Object predicates (can_view_case, can_edit_case, document rules)
- VisibilityScope query filters
- ensure() raising AccessDeniedError
"""

import pytest

from casebook.core.access.visibility import (
    VisibilityScope,
    can_edit_case,
    can_edit_document,
    can_view_case,
    can_view_document,
    ensure,
    is_admin,
)
from casebook.core.enums import VerificationStatus, VerificationTarget, VerifierType
from casebook.core.exceptions import AccessDeniedError
from casebook.models.document import Document
from casebook.models.role_enum import Role
from casebook.models.verification import Verification


pytestmark = pytest.mark.access


def _document(db_session, case, is_public=False, title="Tender notice"):
    document = Document(
        case_id=case.id,
        title=title,
        file_name="notice.pdf",
        file_path="/uploads/documents/notice.pdf",
        file_type="application/pdf",
        file_size=10,
        is_public=is_public,
    )
    db_session.add(document)
    db_session.commit()
    db_session.refresh(document)
    return document


class TestRolePredicates:
    def test_admin_and_moderator_are_admin_level(self, admin_user, moderator_user):
        # Act & Assert
        assert is_admin(admin_user)
        assert is_admin(moderator_user)

    def test_journalist_and_public_are_not_admin_level(self, journalist_user, public_user):
        # Act & Assert
        assert not is_admin(journalist_user)
        assert not is_admin(public_user)
        assert not is_admin(None)


class TestCasePredicates:
    """can_view_case / can_edit_case for every kind of caller."""

    def test_public_case_visible_to_anonymous(self, public_case):
        assert can_view_case(None, public_case)

    def test_private_case_hidden_from_anonymous(self, private_case):
        assert not can_view_case(None, private_case)

    def test_private_case_hidden_from_public_user(self, private_case, public_user):
        assert not can_view_case(public_user, private_case)

    def test_private_case_visible_to_owner(self, private_case, journalist_user):
        # Act & Assert
        assert can_view_case(journalist_user, private_case)
        assert can_edit_case(journalist_user, private_case)

    def test_private_case_hidden_from_other_journalist(self, private_case, other_journalist):
        # Act & Assert
        assert not can_view_case(other_journalist, private_case)
        assert not can_edit_case(other_journalist, private_case)

    def test_admin_sees_and_edits_everything(self, private_case, admin_user, moderator_user):
        # Act & Assert
        for user in (admin_user, moderator_user):
            assert can_view_case(user, private_case)
            assert can_edit_case(user, private_case)

    def test_public_case_not_editable_by_public_user(self, public_case, public_user):
        assert not can_edit_case(public_user, public_case)

    def test_demoted_owner_loses_private_case(self, db_session, private_case, journalist_user):
        # Arrange
        journalist_user.role = Role.PUBLIC
        db_session.commit()

        # Act & Assert
        assert not can_view_case(journalist_user, private_case)
        assert not can_edit_case(journalist_user, private_case)
        assert VisibilityScope(db_session, journalist_user).cases().all() == []


class TestDocumentPredicates:
    def test_public_document_visible_to_anyone(self, db_session, private_case):
        # Arrange
        document = _document(db_session, private_case, is_public=True)

        # Act & Assert
        assert can_view_document(None, document)

    def test_private_document_of_public_case_hidden_from_public_user(
        self, db_session, public_case, public_user
    ):
        # Arrange
        document = _document(db_session, public_case, is_public=False)

        # Act & Assert
        assert not can_view_document(public_user, document)

    def test_private_document_visible_to_case_owner(self, db_session, public_case, journalist_user):
        # Arrange
        document = _document(db_session, public_case, is_public=False)

        # Act & Assert
        assert can_view_document(journalist_user, document)
        assert can_edit_document(journalist_user, document)

    def test_demoted_owner_loses_private_document(self, db_session, public_case, journalist_user):
        # Arrange
        document = _document(db_session, public_case, is_public=False)
        journalist_user.role = Role.PUBLIC
        db_session.commit()

        # Act & Assert
        assert not can_view_document(journalist_user, document)
        assert not can_edit_document(journalist_user, document)

    def test_public_user_never_edits_documents(self, db_session, public_case, public_user):
        # Arrange
        document = _document(db_session, public_case, is_public=True)

        # Act & Assert
        assert not can_edit_document(public_user, document)
        assert not can_edit_document(None, document)


class TestVisibilityScope:
    """Query filters match the object predicates."""

    def test_anonymous_sees_only_public_cases(self, db_session, public_case, private_case):
        # Act
        cases = VisibilityScope(db_session, None).cases().all()

        # Assert
        assert [case.id for case in cases] == [public_case.id]

    def test_owner_sees_own_private_cases(self, db_session, public_case, private_case, journalist_user):
        # Act
        ids = {case.id for case in VisibilityScope(db_session, journalist_user).cases().all()}

        # Assert
        assert ids == {public_case.id, private_case.id}

    def test_other_journalist_sees_only_public(self, db_session, public_case, private_case, other_journalist):
        # Act
        ids = {case.id for case in VisibilityScope(db_session, other_journalist).cases().all()}

        # Assert
        assert ids == {public_case.id}

    def test_admin_scope_is_unrestricted(self, db_session, public_case, private_case, moderator_user):
        # Arrange
        scope = VisibilityScope(db_session, moderator_user)

        # Act & Assert
        assert scope.unrestricted
        assert scope.cases().count() == 2

    def test_documents_scope(self, db_session, public_case, journalist_user, other_journalist):
        # Arrange
        shown = _document(db_session, public_case, is_public=True, title="Shown")
        hidden = _document(db_session, public_case, is_public=False, title="Hidden")

        # Act
        owner_ids = {d.id for d in VisibilityScope(db_session, journalist_user).documents().all()}
        other_ids = {d.id for d in VisibilityScope(db_session, other_journalist).documents().all()}

        # Assert
        assert owner_ids == {shown.id, hidden.id}
        assert other_ids == {shown.id}

    def test_verifications_scope(self, db_session, public_case, public_user, other_journalist, admin_user):
        # Arrange
        mine = Verification(
            target_id=public_case.id,
            target_type=VerificationTarget.CASE,
            status=VerificationStatus.VERIFIED,
            verifier_id=public_user.id,
            verifier_type=VerifierType.PUBLIC,
        )
        theirs = Verification(
            target_id=public_case.id,
            target_type=VerificationTarget.CASE,
            status=VerificationStatus.REJECTED,
            verifier_id=other_journalist.id,
            verifier_type=VerifierType.JOURNALIST,
        )
        db_session.add_all([mine, theirs])
        db_session.commit()

        # Act & Assert
        assert [v.id for v in VisibilityScope(db_session, public_user).verifications().all()] == [mine.id]
        assert VisibilityScope(db_session, admin_user).verifications().count() == 2
        assert VisibilityScope(db_session, None).verifications().count() == 0


class TestEnsure:
    def test_allowed_passes(self, public_user):
        # Act & Assert (no exception)
        ensure(True, public_user, "case:x", "view")

    def test_denied_raises(self, public_user):
        # Act & Assert
        with pytest.raises(AccessDeniedError) as exc_info:
            ensure(False, public_user, "case:x", "edit")

        assert exc_info.value.status_code == 403
