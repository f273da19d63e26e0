"""Structured logging for Cortex.

Events are rendered by structlog on top of the stdlib logging module: JSON
lines in production, the console renderer in development. Request-scoped
values (the correlation ID and the tenant/context being served) are kept in
structlog's contextvars and merged into every event logged while the
request is in flight.

Context payloads never reach the logs: the ``data`` key, if passed to a
logger, is replaced by its type name.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.typing import EventDict, WrappedLogger

CORRELATION_ID_KEY = "correlation_id"

REDACTED_KEYS = frozenset({"data", "api_key"})


def redact_payloads(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Structlog processor replacing caller payloads and secrets in an event.

    Args:
        logger: Wrapped logger
        method_name: Log method name (info, error, etc.)
        event_dict: Event being processed

    Returns:
        The event with ``data`` reduced to its type name and ``api_key`` masked
    """
    for key in REDACTED_KEYS.intersection(event_dict):
        value = event_dict[key]
        event_dict[key] = f"<{type(value).__name__}>" if key == "data" else "***"
    return event_dict


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{log_level}'")
    return level


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure stdlib logging and structlog.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON if True, human-readable console output otherwise

    Raises:
        ValueError: If log_level is not a known level name

    Example:
        >>> setup_logging(log_level="DEBUG", json_logs=False)
        >>> get_logger(__name__).info("storage_connected", backend="redis")
    """
    level = _resolve_level(log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger("cortex").setLevel(level)

    renderer: Any = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_payloads,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str) -> None:
    """Bind the correlation ID for the current context."""
    structlog.contextvars.bind_contextvars(**{CORRELATION_ID_KEY: correlation_id})


def get_correlation_id() -> Optional[str]:
    """Return the correlation ID bound to the current context, or None."""
    return structlog.contextvars.get_contextvars().get(CORRELATION_ID_KEY)


def clear_correlation_id() -> None:
    """Unbind the correlation ID from the current context."""
    structlog.contextvars.unbind_contextvars(CORRELATION_ID_KEY)


def bind_context_key(tenant_id: str, context_id: str) -> None:
    """Bind the tenant and context being served to the current context.

    Backend failures logged further down the call chain then carry both ids
    without every call site passing them explicitly.
    """
    structlog.contextvars.bind_contextvars(tenant_id=tenant_id, context_id=context_id)


def clear_log_context() -> None:
    """Drop every value bound to the current context."""
    structlog.contextvars.clear_contextvars()
