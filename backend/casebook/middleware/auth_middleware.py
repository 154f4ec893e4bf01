"""
Request Middleware Module
=========================

Starlette middleware for request processing.

Features:
- Request ID generation for tracing
- Best-effort extraction of the caller from the bearer token
- Request timing and logging
- Security headers
- Login rate limiting

Note:
    Token handling here only labels requests for logging.
    Authentication is enforced in the dependency layer.
"""

import time
import uuid
from typing import Callable, Optional

from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from casebook.core.config import settings
from casebook.core.exceptions import LoginRateLimitError
from casebook.core.logging import get_logger, request_id_context, security_logger, user_id_context

logger = get_logger(__name__)

LOGIN_PATH = "/auth/login"
RATE_LIMIT_WINDOW_SECONDS = 60


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Request preprocessing.

    Responsibilities:
    - Generate unique request ID for tracing
    - Extract the user id from the Authorization header
    - Add X-Request-ID and X-Process-Time to the response
    - Log each completed request
    """

    PUBLIC_PATHS = {
        "/",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/health",
        "/ready",
    }

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request_id_context.set(request_id)
        user_id_context.set(None)

        request.state.request_id = request_id
        request.state.user_id = None
        request.state.authenticated = False

        if not self._is_public_path(request.url.path):
            payload = self._peek_token(request.headers.get("Authorization"))
            if payload:
                request.state.user_id = payload.get("sub")
                request.state.token_type = payload.get("type")
                request.state.authenticated = True

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request processing error",
                extra={
                    "error": str(e),
                    "path": request.url.path,
                    "method": request.method,
                },
            )
            raise

        process_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        self._log_request(request, response, process_time)

        return response

    def _is_public_path(self, path: str) -> bool:
        return path in self.PUBLIC_PATHS or path.startswith(LOGIN_PATH)

    def _peek_token(self, auth_header: Optional[str]) -> Optional[dict]:
        """
        Decode a bearer token for request labelling only.

        Signature and expiry are checked; audience and issuer are left to
        the dependency layer.
        """
        if not auth_header or not auth_header.startswith("Bearer "):
            return None

        token = auth_header.split(" ", 1)[1]
        try:
            return jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                options={"verify_aud": False, "verify_iss": False},
            )
        except JWTError as e:
            logger.debug("Token decode failed in middleware", extra={"error": str(e)})
            return None

    def _log_request(
        self,
        request: Request,
        response: Response,
        process_time: float,
    ) -> None:
        # Don't log health checks
        if request.url.path in ("/", "/health", "/ready"):
            return

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "user_id": getattr(request.state, "user_id", None),
            "ip_address": request.client.host if request.client else None,
        }

        if response.status_code >= 500:
            logger.error("Request completed with error", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("Request completed with client error", extra=log_data)
        else:
            logger.info("Request completed", extra=log_data)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to all responses.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Referrer-Policy
    - Content-Security-Policy
    - Strict-Transport-Security (in production)
    """

    # Paths that serve Swagger / ReDoc UI assets
    _DOCS_PATHS = {"/docs", "/redoc", "/openapi.json"}

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Swagger UI and ReDoc load assets from cdn.jsdelivr.net
        if settings.DEBUG and request.url.path in self._DOCS_PATHS:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com; "
                "font-src 'self' https://cdn.jsdelivr.net; "
                "worker-src 'self' blob:; "
                "frame-ancestors 'none';"
            )
        else:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self'; "
                "style-src 'self' 'unsafe-inline'; "
                "img-src 'self' data:; "
                "font-src 'self'; "
                "frame-ancestors 'none';"
            )

        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains; preload"
            )

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory per-IP rate limit on POST /auth/login.

    Note:
        State lives in the process. Multiple workers each keep their own
        window.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self._requests: dict[str, list[float]] = {}  # IP -> [timestamps]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        if request.url.path == LOGIN_PATH and request.method == "POST":
            client_ip = request.client.host if request.client else "unknown"

            if self._is_rate_limited(client_ip, settings.LOGIN_RATE_LIMIT, RATE_LIMIT_WINDOW_SECONDS):
                security_logger.log_rate_limit_exceeded(
                    ip_address=client_ip,
                    endpoint=request.url.path,
                )
                exc = LoginRateLimitError(retry_after=RATE_LIMIT_WINDOW_SECONDS)
                return JSONResponse(
                    status_code=exc.status_code,
                    content={"message": exc.message, "details": exc.details},
                    headers={"Retry-After": str(RATE_LIMIT_WINDOW_SECONDS)},
                )

        return await call_next(request)

    def _is_rate_limited(
        self,
        key: str,
        max_requests: int,
        window_seconds: int,
    ) -> bool:
        """
        Record a request for ``key`` and report whether it exceeds the limit.

        Args:
            key: Identifier (usually IP)
            max_requests: Maximum requests allowed
            window_seconds: Time window in seconds
        """
        current_time = time.time()
        window_start = current_time - window_seconds
        self._prune(window_start)

        recent = [ts for ts in self._requests.get(key, []) if ts > window_start]

        if len(recent) >= max_requests:
            self._requests[key] = recent
            return True

        recent.append(current_time)
        self._requests[key] = recent
        return False

    def _prune(self, window_start: float) -> None:
        """Forget keys with no request inside the window."""
        stale = [key for key, stamps in self._requests.items() if not stamps or stamps[-1] <= window_start]
        for key in stale:
            del self._requests[key]
