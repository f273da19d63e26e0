"""FastAPI dependencies for the context routes.

Provides access to the ContextStore held on the application state and the
optional per-tenant API key check.
"""

import hmac
import inspect
from typing import Awaitable, Callable, Mapping, Optional, Union

from fastapi import Header, Request

from cortex.api.errors import ForbiddenError, UnauthorizedError
from cortex.memory.store import ContextStore
from cortex.observability.logging import get_logger

logger = get_logger(__name__)

ApiKeyValidator = Callable[[str, str], Union[bool, Awaitable[bool]]]


class StaticApiKeyValidator:
    """Validates API keys against a fixed tenant -> key mapping.

    Example:
        >>> validator = StaticApiKeyValidator({"tenant-123": "api-key-abc"})
        >>> validator("tenant-123", "api-key-abc")
        True
    """

    def __init__(self, keys: Mapping[str, str]) -> None:
        self._keys = dict(keys)

    def __call__(self, tenant_id: str, api_key: str) -> bool:
        expected = self._keys.get(tenant_id)
        if expected is None:
            return False
        return hmac.compare_digest(expected.encode(), api_key.encode())


def get_context_store(request: Request) -> ContextStore:
    """Return the ContextStore attached to the running application.

    Raises:
        RuntimeError: If the application has no store (lifespan not started)
    """
    store: Optional[ContextStore] = getattr(request.app.state, "context_store", None)
    if store is None:
        raise RuntimeError("Context store is not initialized")
    return store


async def require_tenant_api_key(
    request: Request,
    tenant_id: str,
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> None:
    """Check the X-API-Key header against the configured validator.

    A no-op when the application has no validator configured.

    Args:
        request: Incoming request
        tenant_id: Tenant from the route path
        x_api_key: API key from the X-API-Key header

    Raises:
        UnauthorizedError: If the header is missing
        ForbiddenError: If the validator rejects the key
    """
    validator: Optional[ApiKeyValidator] = getattr(request.app.state, "api_key_validator", None)
    if validator is None:
        return

    if not x_api_key:
        raise UnauthorizedError()

    result = validator(tenant_id, x_api_key)
    if inspect.isawaitable(result):
        result = await result

    if not result:
        logger.warning("api_key_rejected", tenant_id=tenant_id)
        raise ForbiddenError()
