"""
Email Queue Service
===================

Delivers rows of the ``email_queue`` table.

State machine per row:

    PENDING --(claim)--> SENDING --(ok)--> SENT
                            |
                            +--(error, attempts < max)--> PENDING
                            +--(error, attempts >= max)--> FAILED

The transport is pluggable through the EmailSender protocol. The
default sender only logs, which is what development and tests use.
"""

from typing import Optional, Protocol

from sqlalchemy.orm import Session

from casebook.core.config import settings
from casebook.core.enums import EmailStatus
from casebook.core.logging import audit_logger, get_logger, log_execution_time
from casebook.db.base import utc_now
from casebook.models.notification import EmailQueue

logger = get_logger(__name__)


class EmailSender(Protocol):
    def send(self, email: EmailQueue) -> None:
        """Deliver ``email``. Any exception marks the attempt as failed."""


class LoggingEmailSender:
    """Sender that records the delivery in the log instead of sending."""

    def send(self, email: EmailQueue) -> None:
        logger.info(
            "Email delivered",
            extra={
                "email_id": str(email.id),
                "to": email.to_address,
                "from": settings.EMAIL_FROM,
                "subject": email.subject,
            },
        )


class EmailQueueService:
    """
    Batch processor for queued email.

    Usage:
        summary = EmailQueueService(db).process_email_queue()
    """

    def __init__(
        self,
        db: Session,
        sender: Optional[EmailSender] = None,
        batch_size: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ):
        self.db = db
        self.sender = sender or LoggingEmailSender()
        self.batch_size = batch_size or settings.EMAIL_BATCH_SIZE
        self.max_attempts = max_attempts or settings.EMAIL_MAX_ATTEMPTS

    def pending_batch(self) -> list[EmailQueue]:
        """Oldest deliverable rows, at most ``batch_size``."""
        return (
            self.db.query(EmailQueue)
            .filter(
                EmailQueue.status == EmailStatus.PENDING,
                EmailQueue.attempts < self.max_attempts,
            )
            .order_by(EmailQueue.created_at.asc())
            .limit(self.batch_size)
            .all()
        )

    def _deliver(self, email: EmailQueue) -> EmailStatus:
        email.status = EmailStatus.SENDING
        self.db.commit()

        try:
            self.sender.send(email)
        except Exception as e:
            email.attempts += 1
            email.error = str(e)
            email.status = (
                EmailStatus.FAILED if email.attempts >= self.max_attempts else EmailStatus.PENDING
            )
            self.db.commit()
            logger.warning(
                "Email delivery failed",
                extra={
                    "email_id": str(email.id),
                    "attempts": email.attempts,
                    "status": email.status.value,
                    "error": str(e),
                },
            )
            return email.status

        email.status = EmailStatus.SENT
        email.sent_at = utc_now()
        email.error = None
        self.db.commit()
        return email.status

    @log_execution_time(logger, "process_email_queue")
    def process_email_queue(self) -> dict:
        """
        Attempt delivery of one batch.

        A failing row never stops the rest of the batch.

        Returns:
            {"processed", "sent", "failed", "retrying"} counts
        """
        summary = {"processed": 0, "sent": 0, "failed": 0, "retrying": 0}

        for email in self.pending_batch():
            outcome = self._deliver(email)
            summary["processed"] += 1
            if outcome == EmailStatus.SENT:
                summary["sent"] += 1
            elif outcome == EmailStatus.FAILED:
                summary["failed"] += 1
            else:
                summary["retrying"] += 1

        audit_logger.log_action(None, "email_queue_processed", "email_queue", **summary)
        return summary
