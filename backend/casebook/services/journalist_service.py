"""
Journalist Service Module
=========================

Directory listing, profile pages, self-service profile edits,
publications, and the staff verification workflow.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from casebook.core.access.visibility import ensure, is_admin
from casebook.core.enums import MembershipTier, NotificationType, VerificationStatus
from casebook.core.exceptions import JournalistProfileNotFoundError, ValidationError
from casebook.core.logging import audit_logger, get_logger
from casebook.db.base import isoformat, utc_now
from casebook.models.case import Case
from casebook.models.journalist import JournalistProfile, Publication
from casebook.models.user import User
from casebook.schemas.journalist import (
    JournalistAdminUpdate,
    JournalistProfileUpdate,
    PublicationCreate,
)
from casebook.services.case_service import CaseService
from casebook.services.notification_service import NotificationService

logger = get_logger(__name__)

PROFILE_PAGE_CASES = 6
PROFILE_PAGE_PUBLICATIONS = 6


class JournalistService:
    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Serialization
    # --------------------------

    def _counts(self, profile_ids: list[UUID]) -> dict[UUID, dict]:
        """cases / publications / mentees counts per profile."""
        counts = {pid: {"cases": 0, "publications": 0, "mentees": 0} for pid in profile_ids}
        if not profile_ids:
            return counts

        queries = {
            "cases": (Case.journalist_id, Case.id),
            "publications": (Publication.journalist_id, Publication.id),
            "mentees": (JournalistProfile.mentor_id, JournalistProfile.id),
        }
        for key, (group_col, count_col) in queries.items():
            rows = (
                self.db.query(group_col, func.count(count_col))
                .filter(group_col.in_(profile_ids))
                .group_by(group_col)
                .all()
            )
            for profile_id, count in rows:
                counts[profile_id][key] = count
        return counts

    @staticmethod
    def _with_user(profile: JournalistProfile) -> dict:
        item = profile.to_dict()
        item["user"] = {
            "name": profile.user.name,
            "email": profile.user.email,
            "created_at": isoformat(profile.user.created_at),
        }
        return item

    def summarize(self, profiles: list[JournalistProfile]) -> list[dict]:
        counts = self._counts([profile.id for profile in profiles])
        items = []
        for profile in profiles:
            item = self._with_user(profile)
            item["counts"] = counts[profile.id]
            items.append(item)
        return items

    def detail(self, profile: JournalistProfile, own: bool = False) -> dict:
        """
        Profile page.

        Visitors see up to six public cases and six publications; the
        owner (``own=True``) sees every case and publication.
        """
        item = self._with_user(profile)
        item["mentor"] = (
            {"id": str(profile.mentor.id), "user": {"name": profile.mentor.user.name}}
            if profile.mentor else None
        )
        item["mentees"] = [
            {"id": str(mentee.id), "user": {"name": mentee.user.name}}
            for mentee in profile.mentees
        ]

        cases_query = (
            self.db.query(Case)
            .filter(Case.journalist_id == profile.id)
            .order_by(Case.created_at.desc())
        )
        publications_query = (
            self.db.query(Publication)
            .filter(Publication.journalist_id == profile.id)
            .order_by(Publication.published_at.desc())
        )
        if not own:
            cases_query = cases_query.filter(Case.is_public.is_(True)).limit(PROFILE_PAGE_CASES)
            publications_query = publications_query.limit(PROFILE_PAGE_PUBLICATIONS)

        item["cases"] = CaseService(self.db).summarize(cases_query.all())
        item["publications"] = [publication.to_dict() for publication in publications_query.all()]
        item["counts"] = self._counts([profile.id])[profile.id]
        return item

    # --------------------------
    # Queries
    # --------------------------

    def list_journalists(
        self,
        page: int = 1,
        limit: int = 12,
        search: Optional[str] = None,
        specialization: Optional[str] = None,
        location: Optional[str] = None,
        verified: Optional[bool] = None,
    ) -> tuple[list[JournalistProfile], int]:
        query = self.db.query(JournalistProfile).join(JournalistProfile.user)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    User.name.ilike(pattern),
                    JournalistProfile.bio.ilike(pattern),
                    JournalistProfile.specialization.ilike(pattern),
                )
            )
        if specialization:
            query = query.filter(JournalistProfile.specialization.ilike(f"%{specialization}%"))
        if location:
            query = query.filter(JournalistProfile.location.ilike(f"%{location}%"))
        if verified is not None:
            query = query.filter(JournalistProfile.is_verified.is_(verified))

        total = query.count()
        profiles = (
            query.order_by(JournalistProfile.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return profiles, total

    def get(self, profile_id: UUID) -> JournalistProfile:
        profile = self.db.get(JournalistProfile, profile_id)
        if profile is None:
            raise JournalistProfileNotFoundError(identifier=str(profile_id))
        return profile

    def get_own(self, current_user: User) -> JournalistProfile:
        profile = current_user.journalist_profile
        if profile is None:
            raise JournalistProfileNotFoundError()
        return profile

    # --------------------------
    # Mutations
    # --------------------------

    def update_profile(self, profile: JournalistProfile, current_user: User, data: JournalistProfileUpdate) -> JournalistProfile:
        ensure(
            profile.user_id == current_user.id or is_admin(current_user),
            current_user, f"journalist:{profile.id}", "edit",
        )
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(profile, field, value)
        self.db.commit()
        self.db.refresh(profile)

        audit_logger.log_action(
            str(current_user.id), "profile_updated", "journalist_profile", str(profile.id),
            fields=sorted(changes),
        )
        return profile

    def add_publication(self, current_user: User, data: PublicationCreate) -> Publication:
        profile = self.get_own(current_user)
        publication = Publication(journalist_id=profile.id, **data.model_dump())
        self.db.add(publication)
        self.db.commit()
        self.db.refresh(publication)
        return publication

    def admin_update(self, profile_id: UUID, current_user: User, data: JournalistAdminUpdate) -> JournalistProfile:
        """
        Staff change of verification status, tier or mentor.

        Setting VERIFIED marks the profile verified and notifies the
        journalist; any other status clears the verified flag.

        Raises:
            JournalistProfileNotFoundError: Profile or mentor missing
            ValidationError: Profile set as its own mentor
        """
        profile = self.get(profile_id)
        changes = data.model_dump(exclude_unset=True)
        became_verified = False

        if "mentor_id" in changes:
            mentor_id = changes["mentor_id"]
            if mentor_id == profile.id:
                raise ValidationError(message="A journalist cannot mentor themselves")
            if mentor_id is not None:
                self.get(mentor_id)
            profile.mentor_id = mentor_id

        if changes.get("membership_tier") is not None:
            profile.membership_tier = MembershipTier(changes["membership_tier"])

        status = changes.get("verification_status")
        if status is not None:
            became_verified = (
                status == VerificationStatus.VERIFIED
                and profile.verification_status != VerificationStatus.VERIFIED
            )
            profile.verification_status = status
            if status == VerificationStatus.VERIFIED:
                profile.is_verified = True
                if profile.verified_at is None or became_verified:
                    profile.verified_at = utc_now()
            else:
                profile.is_verified = False

        self.db.commit()
        self.db.refresh(profile)

        audit_logger.log_action(
            str(current_user.id), "journalist_verification_changed", "journalist_profile", str(profile.id),
            changes={key: str(value) if value is not None else None for key, value in changes.items()},
        )

        if became_verified:
            NotificationService(self.db).create_notification(
                user_id=profile.user_id,
                type=NotificationType.JOURNALIST_VERIFIED,
                title="Your profile has been verified",
                message="Congratulations! Your journalist credentials have been verified.",
                data={"journalist_id": str(profile.id)},
                entity_id=str(profile.id),
                entity_type="journalist",
            )
        return profile
