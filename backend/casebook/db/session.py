"""
Database Session Management Module
==================================

Responsible for:
- Creating the database engine with pool settings
- Managing session lifecycle
- Providing the FastAPI session dependency
- Connection health checks

PostgreSQL is the production target. SQLite URLs are accepted for local
development and get a single-thread-safe configuration instead of a pool.
"""

from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from casebook.core.config import settings
from casebook.core.logging import get_logger

# Initialize logger
logger = get_logger(__name__)


# ==========================
# Database Engine
# ==========================

def _build_engine():
    if settings.is_sqlite:
        memory = ":memory:" in settings.DATABASE_URL
        return create_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool if memory else None,
            echo=settings.DEBUG,
        )

    return create_engine(
        settings.DATABASE_URL,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,  # Validate connections before use
        echo=settings.DEBUG,
        connect_args={
            "connect_timeout": 10,
            "application_name": "casebook-backend",
        },
    )


engine = _build_engine()


# ==========================
# Pool Event Listeners
# ==========================

@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection, connection_record):
    """Log new connections; enable foreign keys on SQLite."""
    if settings.is_sqlite:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
    logger.debug("New database connection established", extra={"event": "db_connect"})


# ==========================
# Session Factory
# ==========================

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


# ==========================
# Dependency for FastAPI
# ==========================

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.

    Ensures:
    - Session is opened per request
    - Session is closed after the request completes
    - Transactions are rolled back on error

    Usage:
        @router.get("/cases")
        def list_cases(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("Database session error", extra={"error": str(e)})
        db.rollback()
        raise
    finally:
        db.close()


# ==========================
# Database Health Check
# ==========================

def check_database_connection() -> bool:
    """
    Check if database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database health check failed", extra={"error": str(e)})
        return False
