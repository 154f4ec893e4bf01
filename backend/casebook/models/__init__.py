"""
Model Package Initialization
============================

Ensures every model is registered on ``Base.metadata`` when the package
is imported (Alembic autogenerate and the test fixtures rely on this).

Usage:
    from casebook.models import User, Case, Document
"""

from .role_enum import Role
from .user import User
from .journalist import JournalistProfile, Publication
from .case import (
    Authority,
    Case,
    CaseSubscription,
    CaseUpdate,
    Comment,
    Source,
    TimelineEvent,
)
from .document import Document
from .notification import EmailQueue, EmailSubscription, Notification
from .verification import Verification

__all__ = [
    "Role",
    "User",
    "JournalistProfile",
    "Publication",
    "Case",
    "TimelineEvent",
    "Source",
    "Authority",
    "CaseUpdate",
    "Comment",
    "CaseSubscription",
    "Document",
    "Notification",
    "EmailSubscription",
    "EmailQueue",
    "Verification",
]
