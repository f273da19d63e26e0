"""Cortex API module.

HTTP transport for the context store: FastAPI application, routes,
API key checks and error mapping.
"""

from cortex.api.app import app, create_app

__all__ = ["app", "create_app"]
