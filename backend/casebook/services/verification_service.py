"""
Verification Service Module
===========================

Records peer and staff judgments. The verifier type is derived from
the caller's role, and the target must exist for its declared type.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from casebook.core.access.visibility import VisibilityScope, can_view_case, can_view_document
from casebook.core.enums import NotificationType, VerificationTarget, VerifierType
from casebook.core.exceptions import NotFoundError
from casebook.core.logging import audit_logger, get_logger
from casebook.models.case import Case, Source
from casebook.models.document import Document
from casebook.models.journalist import JournalistProfile
from casebook.models.role_enum import Role
from casebook.models.user import User
from casebook.models.verification import Verification
from casebook.schemas.verification import VerificationCreate
from casebook.services.notification_service import NotificationService

logger = get_logger(__name__)

TARGET_MODELS = {
    VerificationTarget.CASE: (Case, "Case"),
    VerificationTarget.SOURCE: (Source, "Source"),
    VerificationTarget.DOCUMENT: (Document, "Document"),
    VerificationTarget.JOURNALIST: (JournalistProfile, "Journalist profile"),
}


def verifier_type_for(role: Role) -> VerifierType:
    if role == Role.JOURNALIST:
        return VerifierType.JOURNALIST
    if role in (Role.ADMIN, Role.MODERATOR):
        return VerifierType.ADMIN
    return VerifierType.PUBLIC


def _target_visible(target, current_user: User) -> bool:
    if isinstance(target, Case):
        return can_view_case(current_user, target)
    if isinstance(target, Source):
        return can_view_case(current_user, target.case)
    if isinstance(target, Document):
        return can_view_document(current_user, target)
    return True


class VerificationService:
    def __init__(self, db: Session):
        self.db = db

    def list_verifications(
        self,
        current_user: User,
        target_id: Optional[UUID] = None,
        target_type: Optional[VerificationTarget] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Verification], int]:
        query = VisibilityScope(self.db, current_user).verifications()
        if target_id:
            query = query.filter(Verification.target_id == target_id)
        if target_type:
            query = query.filter(Verification.target_type == target_type)

        total = query.count()
        verifications = (
            query.order_by(Verification.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return verifications, total

    def _load_target(self, target_type: VerificationTarget, target_id: UUID, current_user: User):
        """Load the target; targets the caller cannot see are reported as missing."""
        model, label = TARGET_MODELS[target_type]
        target = self.db.get(model, target_id)
        if target is None or not _target_visible(target, current_user):
            raise NotFoundError(resource=label, identifier=str(target_id))
        return target

    def create_verification(self, current_user: User, data: VerificationCreate) -> Verification:
        """
        Record a verification.

        When the target is a case owned by another journalist, that
        journalist is notified.

        Raises:
            NotFoundError: If the target does not exist or is hidden from the caller
        """
        target = self._load_target(data.target_type, data.target_id, current_user)

        verification = Verification(
            **data.model_dump(),
            verifier_id=current_user.id,
            verifier_type=verifier_type_for(current_user.role),
        )
        self.db.add(verification)
        self.db.commit()
        self.db.refresh(verification)

        audit_logger.log_verification_recorded(
            str(current_user.id), str(verification.id),
            verification.target_type.value, verification.status.value,
        )

        if isinstance(target, Case) and target.journalist is not None:
            owner_id = target.journalist.user_id
            if owner_id != current_user.id:
                NotificationService(self.db).create_notification(
                    user_id=owner_id,
                    type=NotificationType.VERIFICATION_COMPLETED,
                    title=f"Case Verification: {target.title}",
                    message=(
                        f"{current_user.name or 'A reviewer'} marked your case "
                        f"as {verification.status.value.lower()}"
                    ),
                    data={
                        "case_id": str(target.id),
                        "case_slug": target.slug,
                        "verification_id": str(verification.id),
                        "status": verification.status.value,
                    },
                    entity_id=str(target.id),
                    entity_type="case",
                )
        return verification
