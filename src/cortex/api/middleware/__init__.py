"""API middleware components."""

from cortex.api.middleware.correlation import CorrelationIdMiddleware
from cortex.api.middleware.error_handler import setup_error_handlers

__all__ = ["CorrelationIdMiddleware", "setup_error_handlers"]
