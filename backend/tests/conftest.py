"""
Test Configuration and Fixtures
================================

Central configuration for pytest with all shared fixtures.

Features:
- SQLite in-memory database for testing
- TestClient setup
- Users for every role, journalist profiles and cases
- Temporary upload directory
- Dependency overrides for database session
"""

import os
import tempfile
import uuid
from pathlib import Path
from typing import Callable, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment before importing app modules
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-min-32-chars"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"  # Disable rate limiting in tests
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="casebook-uploads-")
# Cheap hashing keeps the suite fast
os.environ["PASSWORD_HASH_TIME_COST"] = "1"
os.environ["PASSWORD_HASH_MEMORY_COST"] = "1024"
os.environ["PASSWORD_HASH_PARALLELISM"] = "1"

from casebook.core.config import settings
from casebook.core.enums import CaseStatus
from casebook.db.base import Base
from casebook.db.session import get_db
from casebook.main import app as main_app
from casebook.models.case import Case
from casebook.models.journalist import JournalistProfile
from casebook.models.role_enum import Role
from casebook.models.user import User
from casebook.services.auth_service import AuthService


# =====================================
# Database Configuration
# =====================================

# StaticPool keeps the same in-memory connection across sessions
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)

DEFAULT_PASSWORD = "TestPassword123!"


# =====================================
# Database Fixtures
# =====================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Fresh database per test.

    Creates all tables before each test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """TestClient with the database dependency pointed at ``db_session``."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    main_app.dependency_overrides[get_db] = override_get_db

    with TestClient(main_app) as test_client:
        yield test_client

    main_app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch) -> Path:
    """Point document storage at a per-test directory."""
    root = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(root))
    return root


# =====================================
# User Fixtures
# =====================================

@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """
    Factory for users.

    Journalist accounts get a profile, as registration would create.
    """
    def _make_user(
        email: str,
        role: Role = Role.PUBLIC,
        password: str = DEFAULT_PASSWORD,
        name: Optional[str] = None,
        **fields,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            email=email,
            name=name or email.split("@")[0].title(),
            hashed_password=AuthService.hash_password(password),
            role=role,
            **fields,
        )
        if role == Role.JOURNALIST:
            user.journalist_profile = JournalistProfile()
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def public_user(make_user) -> User:
    return make_user("reader@example.org", Role.PUBLIC)


@pytest.fixture
def journalist_user(make_user) -> User:
    return make_user("reporter@example.org", Role.JOURNALIST, name="Asha Reporter")


@pytest.fixture
def other_journalist(make_user) -> User:
    return make_user("stringer@example.org", Role.JOURNALIST, name="Ravi Stringer")


@pytest.fixture
def moderator_user(make_user) -> User:
    return make_user("moderator@example.org", Role.MODERATOR)


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user("admin@example.org", Role.ADMIN)


@pytest.fixture
def locked_user(make_user) -> User:
    return make_user("locked@example.org", Role.PUBLIC, is_locked=True, failed_attempts=5)


@pytest.fixture
def inactive_user(make_user) -> User:
    return make_user("inactive@example.org", Role.PUBLIC, is_active=False)


# =====================================
# Case Fixtures
# =====================================

@pytest.fixture
def make_case(db_session: Session) -> Callable[..., Case]:
    def _make_case(owner: Optional[User], title: str = "Road Fund Diversion", **fields) -> Case:
        fields.setdefault("slug", f"case-{uuid.uuid4().hex[:8]}")
        fields.setdefault("description", "Tracking disbursement of road funds")
        fields.setdefault("category", "Corruption")
        case = Case(
            title=title,
            journalist_id=owner.journalist_profile.id if owner is not None else None,
            **fields,
        )
        db_session.add(case)
        db_session.commit()
        db_session.refresh(case)
        return case

    return _make_case


@pytest.fixture
def public_case(make_case, journalist_user: User) -> Case:
    """Published, public case owned by ``journalist_user``."""
    return make_case(
        journalist_user,
        title="Public Road Fund Diversion",
        slug="public-road-fund-diversion",
        is_public=True,
        status=CaseStatus.PUBLISHED,
    )


@pytest.fixture
def private_case(make_case, journalist_user: User) -> Case:
    """Draft, non-public case owned by ``journalist_user``."""
    return make_case(
        journalist_user,
        title="Private Hospital Tender",
        slug="private-hospital-tender",
    )


# =====================================
# Auth Header Fixtures
# =====================================

def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {AuthService.create_access_token(user)}"}


@pytest.fixture
def public_headers(public_user: User) -> dict:
    return bearer(public_user)


@pytest.fixture
def journalist_headers(journalist_user: User) -> dict:
    return bearer(journalist_user)


@pytest.fixture
def other_journalist_headers(other_journalist: User) -> dict:
    return bearer(other_journalist)


@pytest.fixture
def moderator_headers(moderator_user: User) -> dict:
    return bearer(moderator_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return bearer(admin_user)


# =====================================
# Utility Fixtures
# =====================================

@pytest.fixture
def test_password() -> str:
    """A password that meets every strength rule."""
    return DEFAULT_PASSWORD


@pytest.fixture
def weak_password() -> str:
    return "weak"


@pytest.fixture
def auth_for() -> Callable[[User], dict]:
    """Build bearer headers for any user created inside a test."""
    return bearer
