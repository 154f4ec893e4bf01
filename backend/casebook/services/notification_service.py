"""
Notification Service Module
===========================

In-app notifications, email subscriptions and queuing of outbound
email. Delivery of queued email is handled by EmailQueueService.

Fan-out helpers:
- notify_case_subscribers: every active follower of a case
- notify_journalist_followers: staff reviewers (ADMIN, MODERATOR)
"""

from html import escape
from typing import Any, Iterable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from casebook.core.config import settings
from casebook.core.enums import EmailFrequency, NotificationPriority, NotificationType
from casebook.core.exceptions import NotificationNotFoundError, SubscriptionNotFoundError
from casebook.core.logging import get_logger
from casebook.models.case import CaseSubscription
from casebook.models.notification import EmailQueue, EmailSubscription, Notification
from casebook.models.role_enum import Role
from casebook.models.user import User

logger = get_logger(__name__)


# ==========================
# Email Rendering
# ==========================

def generate_email_html(title: str, message: str, data: Optional[dict] = None) -> str:
    """Render the HTML body of a notification email."""
    data = data or {}
    org = escape(settings.ORGANIZATION_NAME)
    case_url = data.get("case_url")

    link = ""
    if case_url:
        link = (
            f'<p style="margin:24px 0;"><a href="{escape(str(case_url), quote=True)}" '
            'style="background:#1d4ed8;color:#ffffff;padding:10px 18px;'
            'border-radius:4px;text-decoration:none;">View Case</a></p>'
        )

    return (
        "<!DOCTYPE html>"
        "<html><head><meta charset=\"utf-8\"></head>"
        "<body style=\"font-family:Arial,sans-serif;color:#1f2937;\">"
        "<div style=\"max-width:600px;margin:0 auto;\">"
        f"<div style=\"background:#111827;color:#ffffff;padding:16px;\"><h2>{org}</h2></div>"
        "<div style=\"padding:16px;\">"
        f"<h3>{escape(title)}</h3>"
        f"<p>{escape(message)}</p>"
        f"{link}"
        "</div>"
        "<div style=\"padding:16px;font-size:12px;color:#6b7280;\">"
        f"<p>You are receiving this email because you subscribed to updates from {org}.</p>"
        "<p>To unsubscribe, update your notification preferences in your account settings.</p>"
        "</div></div></body></html>"
    )


def generate_email_text(title: str, message: str, data: Optional[dict] = None) -> str:
    """Render the plain-text body of a notification email."""
    data = data or {}
    text = f"{title}\n\n{message}\n\n---\n{settings.ORGANIZATION_NAME}\n"
    if data.get("case_url"):
        text += f"\nView Case: {data['case_url']}\n"
    text += "\nTo unsubscribe, update your notification preferences in your account settings.\n"
    return text


def case_url(slug: str) -> str:
    return f"{settings.SITE_URL.rstrip('/')}/cases/{slug}"


# ==========================
# Notification Service
# ==========================

class NotificationService:
    """
    Notification and email-subscription operations.

    Methods that change rows commit their own transaction, matching the
    other services.
    """

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # In-app Notifications
    # --------------------------

    def _build_notification(
        self,
        user_id: UUID,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict[str, Any]] = None,
        priority: Optional[NotificationPriority] = None,
        entity_id: Optional[str] = None,
        entity_type: Optional[str] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            data=data,
            priority=priority or NotificationPriority.MEDIUM,
            entity_id=str(entity_id) if entity_id else None,
            entity_type=entity_type,
        )
        self.db.add(notification)
        return notification

    def _dispatched(self, notification: Notification) -> None:
        logger.info(
            "Real-time notification dispatched",
            extra={
                "user_id": str(notification.user_id),
                "notification_id": str(notification.id),
                "type": notification.type.value,
            },
        )

    def create_notification(
        self,
        user_id: UUID,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict[str, Any]] = None,
        priority: Optional[NotificationPriority] = None,
        entity_id: Optional[str] = None,
        entity_type: Optional[str] = None,
    ) -> Notification:
        notification = self._build_notification(
            user_id, type, title, message, data, priority, entity_id, entity_type
        )
        self.db.commit()
        self.db.refresh(notification)
        self._dispatched(notification)
        return notification

    def get_user_notifications(self, user_id: UUID, page: int = 1, limit: int = 20) -> tuple[list[Notification], int]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        total = query.count()
        items = (
            query.order_by(Notification.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def get_unread_count(self, user_id: UUID) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )

    def mark_as_read(self, notification_id: UUID, user_id: UUID) -> int:
        """Mark one of the user's notifications read. Returns rows affected."""
        updated = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def mark_all_as_read(self, user_id: UUID) -> int:
        updated = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def delete_notification(self, notification_id: UUID, user_id: UUID) -> None:
        """
        Delete one of the user's notifications.

        Raises:
            NotificationNotFoundError: If the user has no such notification
        """
        deleted = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            self.db.rollback()
            raise NotificationNotFoundError(identifier=str(notification_id))
        self.db.commit()

    # --------------------------
    # Email Subscriptions
    # --------------------------

    def get_email_subscription(self, user_id: UUID) -> Optional[EmailSubscription]:
        return (
            self.db.query(EmailSubscription)
            .filter(EmailSubscription.user_id == user_id)
            .first()
        )

    def create_email_subscription(
        self,
        user_id: UUID,
        email: str,
        preferences: Optional[dict[str, Any]] = None,
        frequency: EmailFrequency = EmailFrequency.DAILY,
    ) -> EmailSubscription:
        """Create or replace the user's email subscription, reactivating it."""
        subscription = self.get_email_subscription(user_id)
        if subscription is None:
            subscription = EmailSubscription(user_id=user_id)
            self.db.add(subscription)

        subscription.email = email
        subscription.preferences = preferences or {}
        subscription.frequency = frequency
        subscription.is_active = True

        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def deactivate_email_subscription(self, user_id: UUID) -> EmailSubscription:
        subscription = self.get_email_subscription(user_id)
        if subscription is None:
            raise SubscriptionNotFoundError()
        subscription.is_active = False
        self.db.commit()
        return subscription

    # --------------------------
    # Email Queue
    # --------------------------

    def _build_email(
        self,
        to: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        template_id: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> EmailQueue:
        email = EmailQueue(
            to_address=to,
            subject=subject,
            html_content=html_content,
            text_content=text_content,
            template_id=template_id,
            data=data,
        )
        self.db.add(email)
        return email

    def queue_email(
        self,
        to: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        template_id: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> EmailQueue:
        """Queue an email as PENDING with no attempts."""
        email = self._build_email(to, subject, html_content, text_content, template_id, data)
        self.db.commit()
        self.db.refresh(email)
        return email

    # --------------------------
    # Fan-out
    # --------------------------

    def _fan_out(
        self,
        user_ids: Iterable[UUID],
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict[str, Any]],
        entity_id: Optional[str],
        entity_type: str,
        with_email: bool,
    ) -> int:
        user_ids = list(dict.fromkeys(user_ids))
        if not user_ids:
            return 0

        notifications = [
            self._build_notification(
                user_id, type, title, message, data,
                entity_id=entity_id, entity_type=entity_type,
            )
            for user_id in user_ids
        ]

        if with_email:
            subscriptions = (
                self.db.query(EmailSubscription)
                .filter(
                    EmailSubscription.user_id.in_(user_ids),
                    EmailSubscription.is_active.is_(True),
                )
                .all()
            )
            for subscription in subscriptions:
                self._build_email(
                    to=subscription.email,
                    subject=f"{settings.EMAIL_SUBJECT_PREFIX}: {title}",
                    html_content=generate_email_html(title, message, data),
                    text_content=generate_email_text(title, message, data),
                    template_id=type.value,
                    data=data,
                )

        self.db.commit()
        for notification in notifications:
            self._dispatched(notification)
        return len(notifications)

    def notify_case_subscribers(
        self,
        case_id: UUID,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict[str, Any]] = None,
        exclude_user_id: Optional[UUID] = None,
    ) -> int:
        """
        Notify every active follower of a case.

        Followers with an active email subscription also get a queued
        email. Returns the number of in-app notifications created.
        """
        query = self.db.query(CaseSubscription.user_id).filter(
            CaseSubscription.case_id == case_id,
            CaseSubscription.is_active.is_(True),
        )
        if exclude_user_id is not None:
            query = query.filter(CaseSubscription.user_id != exclude_user_id)

        user_ids = [row.user_id for row in query.all()]
        count = self._fan_out(
            user_ids, type, title, message, data,
            entity_id=str(case_id), entity_type="case", with_email=True,
        )
        logger.info(
            "Case subscribers notified",
            extra={"case_id": str(case_id), "type": type.value, "recipients": count},
        )
        return count

    def notify_journalist_followers(
        self,
        journalist_id: Optional[UUID],
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> int:
        """Notify active staff reviewers about a journalist's activity."""
        user_ids = [
            row.id
            for row in self.db.query(User.id)
            .filter(User.role.in_((Role.ADMIN, Role.MODERATOR)), User.is_active.is_(True))
            .all()
        ]
        return self._fan_out(
            user_ids, type, title, message, data,
            entity_id=str(journalist_id) if journalist_id else None,
            entity_type="journalist", with_email=False,
        )
