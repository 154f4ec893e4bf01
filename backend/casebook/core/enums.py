"""
Enumeration Module
==================

Defines enumerations used across the application.

All enums are ``str`` enums so they serialize to their value in JSON and
compare equal to plain strings coming from query parameters.
"""

from enum import Enum


class CaseStatus(str, Enum):
    """Editorial lifecycle of an investigative case."""

    DRAFT = "DRAFT"
    IN_PROGRESS = "IN_PROGRESS"
    UNDER_REVIEW = "UNDER_REVIEW"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"
    CLOSED = "CLOSED"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class DocumentType(str, Enum):
    """Kinds of evidence attached to a case."""

    EVIDENCE = "EVIDENCE"
    RTI = "RTI"
    FIR = "FIR"
    NOTICE = "NOTICE"
    VIDEO = "VIDEO"
    AUDIO = "AUDIO"
    IMAGE = "IMAGE"
    LEGAL_DOCUMENT = "LEGAL_DOCUMENT"
    CORRESPONDENCE = "CORRESPONDENCE"


class MembershipTier(str, Enum):
    ASSOCIATE = "ASSOCIATE"
    VERIFIED = "VERIFIED"
    SENIOR = "SENIOR"
    MENTOR = "MENTOR"


class VerificationStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"


class VerificationTarget(str, Enum):
    CASE = "CASE"
    SOURCE = "SOURCE"
    DOCUMENT = "DOCUMENT"
    JOURNALIST = "JOURNALIST"


class VerifierType(str, Enum):
    PUBLIC = "PUBLIC"
    JOURNALIST = "JOURNALIST"
    ADMIN = "ADMIN"


class NotificationType(str, Enum):
    CASE_PUBLISHED = "CASE_PUBLISHED"
    CASE_UPDATED = "CASE_UPDATED"
    CASE_COMMENT = "CASE_COMMENT"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    VERIFICATION_REQUESTED = "VERIFICATION_REQUESTED"
    VERIFICATION_COMPLETED = "VERIFICATION_COMPLETED"
    SUBSCRIPTION_ALERT = "SUBSCRIPTION_ALERT"
    SYSTEM_ANNOUNCEMENT = "SYSTEM_ANNOUNCEMENT"
    JOURNALIST_VERIFIED = "JOURNALIST_VERIFIED"
    MENTION = "MENTION"
    DEADLINE_REMINDER = "DEADLINE_REMINDER"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class EmailStatus(str, Enum):
    """
    Delivery states of a queued email.

    PENDING -> SENDING -> SENT, or back to PENDING on a failed attempt
    until the attempt cap is reached, then FAILED.
    """

    PENDING = "PENDING"
    SENDING = "SENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class EmailFrequency(str, Enum):
    IMMEDIATE = "IMMEDIATE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    NEVER = "NEVER"
