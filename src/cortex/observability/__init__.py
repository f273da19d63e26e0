"""Observability for Cortex: structured logging with request-scoped context."""

from cortex.observability.logging import (
    bind_context_key,
    clear_correlation_id,
    clear_log_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "bind_context_key",
    "clear_log_context",
]
