"""
Notification Routes Module
==========================

Endpoints:
- GET    /api/notifications                 - Own notifications, or unread count
- POST   /api/notifications                 - Send a notification (admin-level)
- POST   /api/notifications/mark-all-read   - Mark every own notification read
- GET    /api/notifications/subscribe       - Email subscription status
- POST   /api/notifications/subscribe       - Create or update email subscription
- DELETE /api/notifications/subscribe       - Deactivate email subscription
- PUT    /api/notifications/{id}            - Mark one notification read
- DELETE /api/notifications/{id}            - Delete one notification

Every operation is scoped to the caller's own notifications.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from casebook.core.dependencies.auth import get_current_user
from casebook.core.dependencies.rbac import require_admin
from casebook.core.enums import EmailFrequency
from casebook.core.exceptions import NotificationNotFoundError, UserNotFoundError
from casebook.core.logging import audit_logger, get_logger
from casebook.db.session import get_db
from casebook.models.user import User
from casebook.schemas import (
    EmailSubscriptionRequest,
    EmailSubscriptionStatus,
    ErrorResponse,
    MessageResponse,
    NotificationCreate,
    Pagination,
)
from casebook.services.notification_service import NotificationService

logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/notifications",
    tags=["Notifications"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Notification not found"},
    },
)


# =====================================
# Inbox
# =====================================

@router.get(
    "",
    summary="List Notifications",
    description="""
    The caller's notifications, newest first.

    With `unread_only=true` only `{"unread_count": n}` is returned.
    """,
)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    service = NotificationService(db)

    if unread_only:
        return {"unread_count": service.get_unread_count(current_user.id)}

    notifications, total = service.get_user_notifications(current_user.id, page=page, limit=limit)
    return {
        "notifications": [notification.to_dict() for notification in notifications],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    }


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Send Notification",
    description="Admin-level only. Sends an in-app notification to one user.",
    responses={403: {"model": ErrorResponse, "description": "Admin access required"}},
)
def create_notification(
    notification_data: NotificationCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    """
    Raises:
        UserNotFoundError: The target user does not exist
    """
    if db.get(User, notification_data.user_id) is None:
        raise UserNotFoundError(identifier=str(notification_data.user_id))

    notification = NotificationService(db).create_notification(**notification_data.model_dump())

    audit_logger.log_action(
        str(current_user.id), "notification_sent", "notification", str(notification.id),
        target_user_id=str(notification_data.user_id),
    )

    return notification.to_dict()


@router.post(
    "/mark-all-read",
    summary="Mark All Read",
)
def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    updated = NotificationService(db).mark_all_as_read(current_user.id)
    return {"message": "All notifications marked as read", "updated": updated}


# =====================================
# Email Subscription
# =====================================

@router.get(
    "/subscribe",
    response_model=EmailSubscriptionStatus,
    summary="Email Subscription Status",
)
def get_subscription(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Current email subscription. Without one, the account email is
    reported with empty preferences.
    """
    subscription = NotificationService(db).get_email_subscription(current_user.id)

    if subscription is None:
        return {
            "subscribed": False,
            "email": current_user.email,
            "preferences": {},
            "frequency": EmailFrequency.DAILY,
            "is_active": False,
        }

    return {
        "subscribed": subscription.is_active,
        "email": subscription.email,
        "preferences": subscription.preferences or {},
        "frequency": subscription.frequency,
        "is_active": subscription.is_active,
    }


@router.post(
    "/subscribe",
    status_code=status.HTTP_201_CREATED,
    summary="Subscribe To Email",
    description="Create the caller's email subscription, or replace and reactivate it.",
)
def subscribe(
    request: Request,
    subscription_data: EmailSubscriptionRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    subscription = NotificationService(db).create_email_subscription(
        current_user.id,
        email=subscription_data.email,
        preferences=subscription_data.preferences,
        frequency=subscription_data.frequency,
    )

    logger.info(
        "Email subscription saved",
        extra={
            "user_id": str(current_user.id),
            "frequency": subscription.frequency.value,
            "path": request.url.path,
        },
    )

    return {
        "message": "Subscribed to email notifications",
        "subscription": subscription.to_dict(),
    }


@router.delete(
    "/subscribe",
    response_model=MessageResponse,
    summary="Unsubscribe From Email",
)
def unsubscribe(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    NotificationService(db).deactivate_email_subscription(current_user.id)
    return {"message": "Unsubscribed from email notifications"}


# =====================================
# Single Notification
# =====================================

@router.put(
    "/{notification_id}",
    response_model=MessageResponse,
    summary="Mark Notification Read",
)
def mark_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Raises:
        NotificationNotFoundError: The caller has no such notification
    """
    if not NotificationService(db).mark_as_read(notification_id, current_user.id):
        raise NotificationNotFoundError(identifier=str(notification_id))
    return {"message": "Notification marked as read"}


@router.delete(
    "/{notification_id}",
    response_model=MessageResponse,
    summary="Delete Notification",
)
def delete_notification(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    NotificationService(db).delete_notification(notification_id, current_user.id)
    return {"message": "Notification deleted"}
