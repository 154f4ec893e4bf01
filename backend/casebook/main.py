"""
Main Application Entry Point
============================

Responsibilities:
- Initialize FastAPI application
- Configure middleware stack
- Register API routers
- Set up exception handlers
- Provide health check endpoints
- Configure CORS

IMPORTANT:
    Database tables are managed via Alembic migrations.
    Do NOT use Base.metadata.create_all() in production.
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from casebook.core.config import settings
from casebook.core.exceptions import CasebookException
from casebook.core.logging import configure_logging, get_logger
from casebook.db.session import check_database_connection

# Import models so every table is registered on Base.metadata
import casebook.models  # noqa: F401

from casebook.routes import (
    admin_routes,
    auth_routes,
    case_routes,
    document_routes,
    journalist_routes,
    notification_routes,
    verification_routes,
)
from casebook.middleware.auth_middleware import (
    AuthMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)

logger = get_logger(__name__)


# =====================================
# Application Lifespan Handler
# =====================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown events.

    Startup:
    - Configure logging
    - Check database connection
    - Ensure the upload directory exists

    Shutdown:
    - Log application shutdown
    """
    configure_logging()

    logger.info(
        "Application starting",
        extra={
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        },
    )

    if not check_database_connection():
        logger.error("Database connection failed on startup")
    else:
        logger.info("Database connection established")

    settings.upload_root.mkdir(parents=True, exist_ok=True)

    try:
        yield
    except asyncio.CancelledError:
        logger.debug("Application shutdown requested (CancelledError caught)")
        raise
    finally:
        logger.info("Application shutdown complete")


# =====================================
# FastAPI App Initialization
# =====================================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    IIJN Casebook - Investigative Journalism Case Management

    ## Features

    * **Cases**: investigative stories with timeline, sources, authorities and updates
    * **Documents**: evidence attachments with per-document visibility
    * **Journalist Network**: profiles, publications, mentorship and verification
    * **Notifications**: in-app notifications and a retrying email queue

    ## Authentication

    Register at `/auth/register`, then use `/auth/login` to obtain access
    and refresh tokens. Send the access token as `Authorization: Bearer <token>`.

    ## Roles

    Roles (in order of increasing permissions):
    * `PUBLIC`: browse public cases, comment, follow
    * `JOURNALIST`: create and manage own cases and documents
    * `MODERATOR`: staff review of all content
    * `ADMIN`: full administration including accounts
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)


# =====================================
# CORS Configuration
# =====================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.cors_methods_list,
    allow_headers=settings.cors_headers_list,
    max_age=3600,  # Cache preflight requests for 1 hour
)


# =====================================
# Custom Middleware
# =====================================

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(AuthMiddleware)


# =====================================
# Exception Handlers
# =====================================

@app.exception_handler(CasebookException)
async def casebook_exception_handler(request: Request, exc: CasebookException):
    """
    Handle application exceptions.

    Renders them as {"message", "details"} with the exception's status.
    """
    logger.warning(
        "Casebook exception",
        extra={
            "exception_type": type(exc).__name__,
            "message": exc.message,
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "message": exc.message,
            "details": exc.details,
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request validation errors.

    Malformed input is a 400 with one entry per failing field.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    logger.warning(
        "Request validation error",
        extra={
            "path": request.url.path,
            "errors": errors,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": "Validation failed",
            "details": {"errors": errors},
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.

    Logs the error and returns a generic error message.
    """
    logger.error(
        "Unhandled exception",
        extra={
            "exception_type": type(exc).__name__,
            "message": str(exc),
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=True,
    )

    # Don't expose internal errors in production
    if settings.ENVIRONMENT == "production":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "message": "An unexpected error occurred",
                "details": {},
            },
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "message": str(exc),
            "details": {"type": type(exc).__name__},
        },
    )


# =====================================
# Register Routers
# =====================================

app.include_router(auth_routes.router)
app.include_router(case_routes.router)
app.include_router(document_routes.router)
app.include_router(journalist_routes.router)
app.include_router(notification_routes.router)
app.include_router(verification_routes.router)
app.include_router(admin_routes.router)


# =====================================
# Health Check Endpoints
# =====================================

@app.get(
    "/",
    tags=["Health"],
    summary="Basic Health Check",
    description="Returns basic service status information.",
)
def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get(
    "/health",
    tags=["Health"],
    summary="Detailed Health Check",
    description="Returns detailed health status including database connectivity.",
)
def detailed_health_check():
    """
    Detailed health check endpoint.

    Returns:
        Detailed health status including database status
    """
    db_healthy = check_database_connection()

    return {
        "status": "healthy" if db_healthy else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "checks": {
            "database": "healthy" if db_healthy else "unhealthy",
        },
    }


@app.get(
    "/ready",
    tags=["Health"],
    summary="Readiness Check",
    description="Returns whether the service is ready to accept requests.",
)
def readiness_check():
    """
    Readiness check for container orchestration.

    Returns:
        200 if ready, 503 if not ready
    """
    if not check_database_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )

    return {"status": "ready"}


# =====================================
# Application Info
# =====================================

@app.get(
    "/info",
    tags=["Info"],
    summary="Application Information",
    description="Returns application configuration information (non-sensitive).",
)
def application_info():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "organization": settings.ORGANIZATION_NAME,
        "features": {
            "rbac": True,
            "jwt_auth": True,
            "rate_limiting": settings.RATE_LIMIT_ENABLED,
            "email_queue": True,
        },
        "token_settings": {
            "access_token_expire_minutes": settings.ACCESS_TOKEN_EXPIRE_MINUTES,
            "refresh_token_expire_days": settings.REFRESH_TOKEN_EXPIRE_DAYS,
        },
        "upload_settings": {
            "max_upload_size_mb": settings.MAX_UPLOAD_SIZE_MB,
        },
    }
