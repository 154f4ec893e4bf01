"""
Logging Infrastructure
======================

Structured logging built on structlog with support for:
- JSON formatted logs for production
- Console formatted logs for development
- Request-scoped context (request id, user id)
- Dedicated security and audit event loggers
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from functools import wraps
from typing import Any, Callable, Dict, Optional, ParamSpec, TypeVar

import structlog
from structlog.types import Processor

from casebook.core.config import get_settings

# Context variables for request tracing
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_context: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

P = ParamSpec("P")
R = TypeVar("R")


def add_context_variables(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    """Stamp request_id and user_id from context variables onto every entry."""
    request_id = request_id_context.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)

    user_id = user_id_context.get()
    if user_id:
        event_dict.setdefault("user_id", user_id)

    return event_dict


def get_log_level(level_name: str) -> int:
    """Convert string log level to logging constant."""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(level_name.upper(), logging.INFO)


def get_processors(log_format: str) -> list[Processor]:
    """Get structlog processors for the configured output format."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_variables,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return processors


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    Called once during application startup.
    """
    settings = get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=get_log_level(settings.LOG_LEVEL),
    )

    structlog.configure(
        processors=get_processors(settings.LOG_FORMAT),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("case_created", case_id="123")
    """
    return structlog.get_logger(name)


def log_execution_time(
    log: structlog.stdlib.BoundLogger,
    operation: str,
    **extra_fields: Any,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator to log execution time of a function.

    Example:
        >>> @log_execution_time(log, "process_email_queue")
        ... def process_email_queue(self) -> dict:
        ...     ...
    """
    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.error(
                    f"{operation}_failed",
                    duration_ms=round(duration_ms, 2),
                    success=False,
                    error=str(e),
                    error_type=type(e).__name__,
                    **extra_fields,
                )
                raise
            duration_ms = (time.perf_counter() - start_time) * 1000
            log.info(
                f"{operation}_completed",
                duration_ms=round(duration_ms, 2),
                success=True,
                **extra_fields,
            )
            return result
        return wrapper
    return decorator


# =====================================
# Security Event Logger
# =====================================

class SecurityLogger:
    """
    Specialized logger for authentication and access-control events.

    Every event carries ``event_category="security"`` so log shippers can
    route them separately.
    """

    def __init__(self) -> None:
        self.log = get_logger("casebook.security")

    def _emit(self, level: str, event: str, **fields: Any) -> None:
        getattr(self.log, level)(event, event_category="security", **fields)

    def log_login_success(self, user_id: str, ip_address: str, user_agent: str = "unknown") -> None:
        self._emit("info", "login_success", user_id=user_id, ip_address=ip_address, user_agent=user_agent)

    def log_login_failure(self, email: str, ip_address: str, reason: str) -> None:
        self._emit("warning", "login_failure", email=email, ip_address=ip_address, reason=reason)

    def log_account_locked(self, user_id: str, ip_address: str) -> None:
        self._emit("warning", "account_locked", user_id=user_id, ip_address=ip_address)

    def log_token_invalid(self, reason: str, ip_address: str) -> None:
        self._emit("warning", "token_invalid", reason=reason, ip_address=ip_address)

    def log_token_refresh(self, user_id: str) -> None:
        self._emit("info", "token_refresh", user_id=user_id)

    def log_logout(self, user_id: str) -> None:
        self._emit("info", "logout", user_id=user_id)

    def log_unauthorized_access(self, user_id: Optional[str], resource: str, action: str) -> None:
        self._emit("warning", "unauthorized_access", user_id=user_id, resource=resource, action=action)

    def log_rate_limit_exceeded(self, ip_address: str, endpoint: str) -> None:
        self._emit("warning", "rate_limit_exceeded", ip_address=ip_address, endpoint=endpoint)


# =====================================
# Audit Logger
# =====================================

class AuditLogger:
    """Records who changed what, for moderation and editorial review."""

    def __init__(self) -> None:
        self.log = get_logger("casebook.audit")

    def log_action(
        self,
        actor_id: Optional[str],
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        **details: Any,
    ) -> None:
        self.log.info(
            "audit_event",
            event_category="audit",
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            **details,
        )

    def log_user_modified(self, actor_id: str, target_user_id: str, changes: dict) -> None:
        self.log_action(actor_id, "user_modified", "user", target_user_id, changes=changes)

    def log_case_created(self, actor_id: str, case_id: str, slug: str) -> None:
        self.log_action(actor_id, "case_created", "case", case_id, slug=slug)

    def log_case_deleted(self, actor_id: str, case_id: str) -> None:
        self.log_action(actor_id, "case_deleted", "case", case_id)

    def log_document_uploaded(self, actor_id: str, document_id: str, case_id: str) -> None:
        self.log_action(actor_id, "document_uploaded", "document", document_id, case_id=case_id)

    def log_document_deleted(self, actor_id: str, document_id: str) -> None:
        self.log_action(actor_id, "document_deleted", "document", document_id)

    def log_verification_recorded(self, actor_id: str, verification_id: str, target_type: str, status: str) -> None:
        self.log_action(
            actor_id, "verification_recorded", "verification", verification_id,
            target_type=target_type, status=status,
        )


security_logger = SecurityLogger()
audit_logger = AuditLogger()
