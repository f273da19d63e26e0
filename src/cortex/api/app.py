"""FastAPI application factory for the Cortex context API.

Run with uvicorn::

    uvicorn cortex.api.app:app
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from cortex import __version__
from cortex.api.dependencies import ApiKeyValidator, StaticApiKeyValidator
from cortex.api.middleware.correlation import CorrelationIdMiddleware
from cortex.api.middleware.error_handler import setup_error_handlers
from cortex.api.routes.contexts import router as contexts_router
from cortex.api.routes.health import router as health_router
from cortex.config import CortexSettings
from cortex.memory.backends import create_storage_adapter
from cortex.memory.store import ContextStore
from cortex.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build, connect and tear down the storage backend.

    A store handed to create_app() is used as is and left untouched on
    shutdown; otherwise the backend named by the settings is built here.

    Args:
        app: FastAPI application instance

    Yields:
        None during application runtime
    """
    settings: CortexSettings = app.state.settings
    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)

    if app.state.context_store is not None:
        yield
        return

    adapter = create_storage_adapter(settings)
    logger.info("application_startup", backend=adapter.name)

    try:
        await adapter.connect()
        await adapter.init()
        app.state.context_store = ContextStore(adapter, settings.store_config())
        yield
    finally:
        logger.info("application_shutdown", backend=adapter.name)
        await adapter.disconnect()
        app.state.context_store = None


def create_app(
    settings: Optional[CortexSettings] = None,
    store: Optional[ContextStore] = None,
    api_key_validator: Optional[ApiKeyValidator] = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Application settings; loaded from the environment if None
        store: Pre-built ContextStore; built from settings at startup if None
        api_key_validator: ``(tenant_id, api_key) -> bool`` (sync or async).
            Defaults to a StaticApiKeyValidator over ``settings.api_keys``;
            no API key check when neither is given.

    Returns:
        Configured FastAPI application

    Examples:
        >>> app = create_app(store=ContextStore(InMemoryStorageAdapter()))
    """
    if settings is None:
        settings = CortexSettings.from_env()
    if api_key_validator is None and settings.api_keys:
        api_key_validator = StaticApiKeyValidator(settings.api_keys)

    app = FastAPI(
        title="Cortex Context API",
        version=__version__,
        description="Multi-tenant, versioned context store",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.context_store = store
    app.state.api_key_validator = api_key_validator

    app.add_middleware(CorrelationIdMiddleware)  # type: ignore[arg-type]
    setup_error_handlers(app)

    app.include_router(contexts_router)
    app.include_router(health_router)

    return app


# Module-level app instance for uvicorn
app = create_app()
