"""API route handlers for Cortex."""

from cortex.api.routes.contexts import router as contexts_router
from cortex.api.routes.health import router as health_router

__all__ = ["contexts_router", "health_router"]
