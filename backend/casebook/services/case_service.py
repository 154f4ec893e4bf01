"""
Case Service Module
===================

Business logic for cases and the records attached to them:
- Slug generation with collision suffix
- Visibility-scoped listing and lookup
- Publish transition (published_at, subscriber notification)
- Timeline, sources, authorities, updates, comments, subscriptions
"""

import re
import secrets
import string
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from casebook.core.access.visibility import (
    VisibilityScope,
    can_edit_case,
    can_view_case,
    ensure,
)
from casebook.core.enums import CaseStatus, NotificationType
from casebook.core.exceptions import CaseNotFoundError, SubscriptionNotFoundError
from casebook.core.logging import audit_logger, get_logger
from casebook.db.base import utc_now
from casebook.models.case import (
    Authority,
    Case,
    CaseSubscription,
    CaseUpdate,
    Comment,
    Source,
    TimelineEvent,
)
from casebook.models.document import Document
from casebook.models.user import User
from casebook.schemas.case import (
    AuthorityCreate,
    CaseCreate,
    CaseUpdateCreate,
    CaseUpdateRequest,
    CommentCreate,
    SourceCreate,
    TimelineEventCreate,
)
from casebook.services.notification_service import NotificationService, case_url
from casebook.services.storage_service import StorageService

logger = get_logger(__name__)

SLUG_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
SLUG_SUFFIX_LENGTH = 6
NULLABLE_FIELDS = {"content", "tags", "location"}


# ==========================
# Slugs
# ==========================

def slugify(title: str) -> str:
    """Lower-case ``title`` and collapse every non-alphanumeric run into '-'."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "case"


def random_suffix(length: int = SLUG_SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(SLUG_SUFFIX_ALPHABET) for _ in range(length))


# ==========================
# Serialization
# ==========================

def journalist_brief(case: Case) -> Optional[dict]:
    journalist = case.journalist
    if journalist is None:
        return None
    return {
        "id": str(journalist.id),
        "user": {"name": journalist.user.name, "email": journalist.user.email},
    }


class CaseService:
    """
    Case operations.

    Permission failures raise AccessDeniedError; missing cases raise
    CaseNotFoundError. Both are rendered by the application handler.
    """

    def __init__(self, db: Session, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage or StorageService()
        self.notifications = NotificationService(db)

    # --------------------------
    # Slugs
    # --------------------------

    def _slug_taken(self, slug: str, exclude_id: Optional[UUID] = None) -> bool:
        query = self.db.query(Case.id).filter(Case.slug == slug)
        if exclude_id is not None:
            query = query.filter(Case.id != exclude_id)
        return query.first() is not None

    def generate_slug(self, title: str, exclude_id: Optional[UUID] = None) -> str:
        """
        Unique slug for ``title``.

        A taken slug gets a random six character base36 suffix.
        """
        base = slugify(title)
        slug = base
        while self._slug_taken(slug, exclude_id):
            slug = f"{base}-{random_suffix()}"
        return slug

    # --------------------------
    # Serialization
    # --------------------------

    def _count_by_case(self, model, case_ids: list[UUID]) -> dict[UUID, int]:
        if not case_ids:
            return {}
        rows = (
            self.db.query(model.case_id, func.count(model.id))
            .filter(model.case_id.in_(case_ids))
            .group_by(model.case_id)
            .all()
        )
        return dict(rows)

    def summarize(self, cases: list[Case]) -> list[dict]:
        """List representation: case fields, journalist and child counts."""
        ids = [case.id for case in cases]
        documents = self._count_by_case(Document, ids)
        comments = self._count_by_case(Comment, ids)
        updates = self._count_by_case(CaseUpdate, ids)

        items = []
        for case in cases:
            item = case.to_dict()
            item["journalist"] = journalist_brief(case)
            item["counts"] = {
                "documents": documents.get(case.id, 0),
                "comments": comments.get(case.id, 0),
                "updates": updates.get(case.id, 0),
            }
            items.append(item)
        return items

    @staticmethod
    def detail(case: Case) -> dict:
        item = case.to_dict()
        item["journalist"] = journalist_brief(case)
        item["timeline"] = [event.to_dict() for event in case.timeline]
        item["documents"] = [document.to_dict() for document in case.documents]
        item["sources"] = [source.to_dict() for source in case.sources]
        item["authorities"] = [authority.to_dict() for authority in case.authorities]
        item["updates"] = [update.to_dict() for update in case.updates]
        item["comments"] = [comment.to_dict() for comment in case.comments]
        item["counts"] = {
            "documents": len(case.documents),
            "comments": len(case.comments),
            "updates": len(case.updates),
            "timeline": len(case.timeline),
        }
        return item

    # --------------------------
    # Queries
    # --------------------------

    def list_cases(
        self,
        current_user: Optional[User],
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[CaseStatus] = None,
        journalist_id: Optional[UUID] = None,
    ) -> tuple[list[Case], int]:
        """Cases visible to ``current_user``, newest first."""
        query = VisibilityScope(self.db, current_user).cases()

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Case.title.ilike(pattern),
                    Case.description.ilike(pattern),
                    Case.content.ilike(pattern),
                )
            )
        if category:
            query = query.filter(Case.category == category)
        if status:
            query = query.filter(Case.status == status)
        if journalist_id:
            query = query.filter(Case.journalist_id == journalist_id)

        total = query.count()
        cases = (
            query.order_by(Case.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return cases, total

    def get(self, case_id: UUID) -> Case:
        case = self.db.get(Case, case_id)
        if case is None:
            raise CaseNotFoundError(identifier=str(case_id))
        return case

    def get_visible(self, case_id: UUID, current_user: Optional[User]) -> Case:
        case = self.get(case_id)
        ensure(can_view_case(current_user, case), current_user, f"case:{case_id}", "view")
        return case

    def get_visible_by_slug(self, slug: str, current_user: Optional[User]) -> Case:
        case = self.db.query(Case).filter(Case.slug == slug).first()
        if case is None:
            raise CaseNotFoundError(identifier=slug)
        ensure(can_view_case(current_user, case), current_user, f"case:{slug}", "view")
        return case

    def get_editable(self, case_id: UUID, current_user: User) -> Case:
        case = self.get(case_id)
        ensure(can_edit_case(current_user, case), current_user, f"case:{case_id}", "edit")
        return case

    # --------------------------
    # Mutations
    # --------------------------

    def create_case(self, current_user: User, data: CaseCreate) -> Case:
        case = Case(
            **data.model_dump(),
            slug=self.generate_slug(data.title),
            status=CaseStatus.DRAFT,
            journalist_id=current_user.journalist_profile_id,
        )
        self.db.add(case)
        self.db.commit()
        self.db.refresh(case)

        audit_logger.log_case_created(str(current_user.id), str(case.id), case.slug)

        if case.is_public:
            journalist_name = current_user.name or "A journalist"
            self.notifications.notify_journalist_followers(
                journalist_id=case.journalist_id,
                type=NotificationType.CASE_PUBLISHED,
                title=f"New Case Published: {case.title}",
                message=f"{journalist_name} has published a new case: {case.description}",
                data={
                    "case_id": str(case.id),
                    "case_slug": case.slug,
                    "journalist_name": journalist_name,
                },
            )
        return case

    def update_case(self, case_id: UUID, current_user: User, data: CaseUpdateRequest) -> Case:
        case = self.get_editable(case_id, current_user)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }

        if "title" in changes and changes["title"] != case.title:
            case.slug = self.generate_slug(changes["title"], exclude_id=case.id)

        newly_published = (
            changes.get("status") == CaseStatus.PUBLISHED
            and case.status != CaseStatus.PUBLISHED
        )

        for field, value in changes.items():
            setattr(case, field, value)

        if newly_published and case.published_at is None:
            case.published_at = utc_now()

        self.db.commit()
        self.db.refresh(case)

        logger.info(
            "Case updated",
            extra={"case_id": str(case.id), "fields": sorted(changes)},
        )

        if newly_published:
            self.notifications.notify_case_subscribers(
                case.id,
                NotificationType.CASE_PUBLISHED,
                title=f"Case Published: {case.title}",
                message=f"The case you follow has been published: {case.title}",
                data={"case_id": str(case.id), "case_slug": case.slug, "case_url": case_url(case.slug)},
            )
        return case

    def delete_case(self, case_id: UUID, current_user: User) -> None:
        """Delete a case, its children and its stored document files."""
        case = self.get_editable(case_id, current_user)
        file_paths = [document.file_path for document in case.documents]

        self.db.delete(case)
        self.db.commit()

        for file_path in file_paths:
            self.storage.delete(file_path)

        audit_logger.log_case_deleted(str(current_user.id), str(case_id))

    # --------------------------
    # Children
    # --------------------------

    def _add_child(self, child):
        self.db.add(child)
        self.db.commit()
        self.db.refresh(child)
        return child

    def add_timeline_event(self, case_id: UUID, current_user: User, data: TimelineEventCreate) -> TimelineEvent:
        case = self.get_editable(case_id, current_user)
        return self._add_child(TimelineEvent(case_id=case.id, **data.model_dump()))

    def add_source(self, case_id: UUID, current_user: User, data: SourceCreate) -> Source:
        case = self.get_editable(case_id, current_user)
        return self._add_child(Source(case_id=case.id, **data.model_dump()))

    def add_authority(self, case_id: UUID, current_user: User, data: AuthorityCreate) -> Authority:
        case = self.get_editable(case_id, current_user)
        return self._add_child(Authority(case_id=case.id, **data.model_dump()))

    def add_update(self, case_id: UUID, current_user: User, data: CaseUpdateCreate) -> CaseUpdate:
        case = self.get_editable(case_id, current_user)
        update = self._add_child(
            CaseUpdate(case_id=case.id, author_id=current_user.id, **data.model_dump())
        )
        self.notifications.notify_case_subscribers(
            case.id,
            NotificationType.CASE_UPDATED,
            title=f"Case Update: {case.title}",
            message=update.title,
            data={"case_id": str(case.id), "case_slug": case.slug, "case_url": case_url(case.slug)},
        )
        return update

    def add_comment(self, case_id: UUID, current_user: User, data: CommentCreate) -> Comment:
        case = self.get_visible(case_id, current_user)
        comment = self._add_child(
            Comment(case_id=case.id, user_id=current_user.id, content=data.content)
        )
        self.notifications.notify_case_subscribers(
            case.id,
            NotificationType.CASE_COMMENT,
            title=f"New Comment: {case.title}",
            message=f"{current_user.name or 'Someone'} commented on {case.title}",
            data={"case_id": str(case.id), "case_slug": case.slug, "case_url": case_url(case.slug)},
            exclude_user_id=current_user.id,
        )
        return comment

    def subscribe(self, case_id: UUID, current_user: User) -> CaseSubscription:
        case = self.get_visible(case_id, current_user)
        subscription = (
            self.db.query(CaseSubscription)
            .filter(CaseSubscription.case_id == case.id, CaseSubscription.user_id == current_user.id)
            .first()
        )
        if subscription is None:
            subscription = CaseSubscription(case_id=case.id, user_id=current_user.id)
            self.db.add(subscription)
        subscription.is_active = True
        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def unsubscribe(self, case_id: UUID, current_user: User) -> CaseSubscription:
        subscription = (
            self.db.query(CaseSubscription)
            .filter(CaseSubscription.case_id == case_id, CaseSubscription.user_id == current_user.id)
            .first()
        )
        if subscription is None:
            raise SubscriptionNotFoundError(identifier=str(case_id))
        subscription.is_active = False
        self.db.commit()
        return subscription
