"""Structured logging configuration for auditgate."""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.types import Processor

from .config import get_settings


def setup_logging() -> None:
    """Configure structured logging for auditgate."""
    settings = get_settings()

    # stdout is reserved for command output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=settings.log_level.upper(),
    )

    # Configure structlog
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def set_log_level(level: str) -> None:
    """Change the root log level after setup (used by --verbose)."""
    logging.getLogger().setLevel(level.upper())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_validation_event(
    logger: structlog.stdlib.BoundLogger,
    source: str,
    total: int,
    valid: int,
    rejected: int,
    domain: Optional[str] = None,
    duration_ms: Optional[int] = None,
    **kwargs: Any,
) -> None:
    """Log the outcome of one validation run with standardized fields."""
    log_data: Dict[str, Any] = {
        "source": source,
        "total": total,
        "valid": valid,
        "rejected": rejected,
    }

    if domain is not None:
        log_data["domain"] = domain
    if duration_ms is not None:
        log_data["duration_ms"] = duration_ms

    log_data.update(kwargs)

    if rejected:
        logger.warning("validation.completed", **log_data)
    else:
        logger.info("validation.completed", **log_data)


def log_review_event(
    logger: structlog.stdlib.BoundLogger,
    issue: str,
    decision: str,
    reason: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """Log a single human review decision."""
    log_data: Dict[str, Any] = {
        "issue": issue,
        "decision": decision,
    }

    if reason is not None:
        log_data["reason"] = reason

    log_data.update(kwargs)

    logger.info(f"review.{decision}", **log_data)


# Initialize logging on module import
setup_logging()
