"""
Visibility Policy Module
========================

Who may see and who may change cases, documents and verifications.

Rules:
- Admin-level users (ADMIN, MODERATOR) see and edit everything
- The journalist owning a case sees and edits it and its documents
- Everyone else, including anonymous visitors, sees public records only

The predicates work on loaded objects; VisibilityScope applies the same
rules as query filters so list endpoints never load hidden rows.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import false, or_
from sqlalchemy.orm import Query, Session

from casebook.core.exceptions import AccessDeniedError
from casebook.core.logging import get_logger, security_logger
from casebook.models.case import Case
from casebook.models.document import Document
from casebook.models.role_enum import Role
from casebook.models.user import User
from casebook.models.verification import Verification

logger = get_logger(__name__)

ADMIN_ROLES = (Role.ADMIN, Role.MODERATOR)


# =====================================
# Role Predicates
# =====================================

def is_admin(user: Optional[User]) -> bool:
    """True for admin-level accounts (ADMIN or MODERATOR)."""
    return user is not None and user.role in ADMIN_ROLES


def is_journalist(user: Optional[User]) -> bool:
    return user is not None and user.role == Role.JOURNALIST


def profile_id_of(user: Optional[User]) -> Optional[UUID]:
    if user is None:
        return None
    return user.journalist_profile_id


def owns_case(user: Optional[User], case: Case) -> bool:
    """True if ``user`` is the journalist whose profile owns ``case``."""
    if not is_journalist(user):
        return False
    profile_id = profile_id_of(user)
    return profile_id is not None and case.journalist_id == profile_id


# =====================================
# Object Predicates
# =====================================

def can_edit_case(user: Optional[User], case: Case) -> bool:
    return is_admin(user) or owns_case(user, case)


def can_view_case(user: Optional[User], case: Case) -> bool:
    return case.is_public or can_edit_case(user, case)


def can_edit_document(user: Optional[User], document: Document) -> bool:
    if user is None or user.role == Role.PUBLIC:
        return False
    return is_admin(user) or owns_case(user, document.case)


def can_view_document(user: Optional[User], document: Document) -> bool:
    if document.is_public:
        return True
    return is_admin(user) or owns_case(user, document.case)


def ensure(allowed: bool, user: Optional[User], resource: str, action: str) -> None:
    """
    Raise AccessDeniedError unless ``allowed``.

    Denials are recorded on the security log.
    """
    if allowed:
        return
    security_logger.log_unauthorized_access(
        user_id=str(user.id) if user else None,
        resource=resource,
        action=action,
    )
    raise AccessDeniedError(resource=resource)


# =====================================
# Query Scoping
# =====================================

class VisibilityScope:
    """
    Query helper that restricts rows to what ``current_user`` may see.

    Usage:
        scope = VisibilityScope(db, current_user)
        cases = scope.cases().order_by(Case.created_at.desc()).all()
    """

    def __init__(self, db: Session, current_user: Optional[User]):
        self.db = db
        self.current_user = current_user

    @property
    def unrestricted(self) -> bool:
        return is_admin(self.current_user)

    def _case_criterion(self):
        """Filter clause on Case matching the caller's visible cases."""
        profile_id = profile_id_of(self.current_user) if is_journalist(self.current_user) else None
        if profile_id is not None:
            return or_(Case.is_public.is_(True), Case.journalist_id == profile_id)
        return Case.is_public.is_(True)

    def cases(self) -> Query:
        query = self.db.query(Case)
        if self.unrestricted:
            return query
        return query.filter(self._case_criterion())

    def documents(self) -> Query:
        """
        Documents the caller may see.

        A non-admin sees public documents plus every document of a case
        they own, matching ``can_view_document``.
        """
        query = self.db.query(Document).join(Document.case)
        if self.unrestricted:
            return query

        profile_id = profile_id_of(self.current_user) if is_journalist(self.current_user) else None
        if profile_id is not None:
            return query.filter(
                or_(Document.is_public.is_(True), Case.journalist_id == profile_id)
            )
        return query.filter(Document.is_public.is_(True))

    def verifications(self) -> Query:
        query = self.db.query(Verification)
        if self.unrestricted:
            return query
        if self.current_user is None:
            return query.filter(false())
        return query.filter(Verification.verifier_id == self.current_user.id)
