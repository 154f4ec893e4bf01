from sqlalchemy import func
from sqlalchemy.orm import Session

from casebook.core.enums import CaseStatus, VerificationStatus
from casebook.db.base import isoformat
from casebook.models.case import Case
from casebook.models.journalist import JournalistProfile
from casebook.models.user import User

RECENT_LIMIT = 5


def _count(db: Session, column, *criteria) -> int:
    return db.query(func.count(column)).filter(*criteria).scalar() or 0


def _grouped(db: Session, column, id_column) -> dict:
    rows = db.query(column, func.count(id_column)).group_by(column).all()
    return {key.value if hasattr(key, "value") else key: count for key, count in rows}


# ==========================================
# OVERVIEW
# ==========================================

def generate_overview(db: Session) -> dict:

    total_users = _count(db, User.id)
    total_journalists = _count(db, JournalistProfile.id)
    total_cases = _count(db, Case.id)
    published_cases = _count(db, Case.id, Case.status == CaseStatus.PUBLISHED)

    return {
        "total_users": total_users,
        "total_journalists": total_journalists,
        "verified_journalists": _count(
            db, JournalistProfile.id,
            JournalistProfile.verification_status == VerificationStatus.VERIFIED,
        ),
        "public_users": total_users - total_journalists,
        "total_cases": total_cases,
        "published_cases": published_cases,
        "active_cases": total_cases - published_cases,
        "pending_verifications": _count(
            db, JournalistProfile.id,
            JournalistProfile.verification_status == VerificationStatus.PENDING,
        ),
    }


# ==========================================
# RECENT ACTIVITY
# ==========================================

def recent_cases(db: Session) -> list[dict]:
    cases = db.query(Case).order_by(Case.created_at.desc()).limit(RECENT_LIMIT).all()
    return [
        {
            "id": str(case.id),
            "title": case.title,
            "slug": case.slug,
            "status": case.status.value,
            "created_at": isoformat(case.created_at),
            "journalist": (
                {"user": {"name": case.journalist.user.name}} if case.journalist else None
            ),
        }
        for case in cases
    ]


def recent_users(db: Session) -> list[dict]:
    users = db.query(User).order_by(User.created_at.desc()).limit(RECENT_LIMIT).all()
    return [
        {
            "id": str(user.id),
            "name": user.name,
            "email": user.email,
            "role": user.role.value,
            "created_at": isoformat(user.created_at),
            "journalist_profile": (
                {
                    "verification_status": user.journalist_profile.verification_status.value,
                    "membership_tier": user.journalist_profile.membership_tier.value,
                }
                if user.journalist_profile else None
            ),
        }
        for user in users
    ]


def generate_dashboard(db: Session) -> dict:
    return {
        "overview": generate_overview(db),
        "case_stats": _grouped(db, Case.status, Case.id),
        "journalist_stats": _grouped(db, JournalistProfile.verification_status, JournalistProfile.id),
        "recent_cases": recent_cases(db),
        "recent_users": recent_users(db),
    }
