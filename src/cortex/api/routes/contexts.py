"""Context API route handlers.

Exposes ContextStore over HTTP:

    GET    /cortex/{tenant_id}/{context_id}   -> 200 record | 404
    POST   /cortex/{tenant_id}/{context_id}   -> 201 record (body is the data)
    DELETE /cortex/{tenant_id}/{context_id}   -> 204
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from cortex.api.dependencies import get_context_store, require_tenant_api_key
from cortex.api.errors import ContextNotFoundError
from cortex.memory.errors import InvalidInputError
from cortex.memory.store import ContextStore
from cortex.observability.logging import bind_context_key, get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/cortex",
    tags=["contexts"],
    dependencies=[Depends(require_tenant_api_key)],
)


def _is_empty(data: Any) -> bool:
    return data is None or (isinstance(data, (dict, list, str)) and len(data) == 0)


@router.get("/{tenant_id}/{context_id}")
async def get_context(
    tenant_id: str,
    context_id: str,
    store: ContextStore = Depends(get_context_store),
) -> JSONResponse:
    """Return the stored context.

    Raises:
        ContextNotFoundError: If no context exists for the key
    """
    bind_context_key(tenant_id, context_id)
    record = await store.get_memory(tenant_id, context_id)
    if record is None:
        raise ContextNotFoundError(tenant_id, context_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=record.to_wire())


@router.post("/{tenant_id}/{context_id}")
async def set_context(
    tenant_id: str,
    context_id: str,
    data: Any = Body(default=None),
    ttl: Optional[int] = Query(default=None, ge=0),
    tag: Optional[list[str]] = Query(default=None),
    store: ContextStore = Depends(get_context_store),
) -> JSONResponse:
    """Create or update a context from the JSON request body.

    Args:
        tenant_id: Tenant from the path
        context_id: Context id from the path
        data: JSON body stored as the context data
        ttl: Optional ttl override in seconds
        tag: Optional tags, repeatable (``?tag=a&tag=b``)
        store: Context store

    Returns:
        201 with the stored record

    Raises:
        InvalidInputError: If the body is empty
    """
    bind_context_key(tenant_id, context_id)
    if _is_empty(data):
        raise InvalidInputError("Request body cannot be empty.")

    metadata: dict[str, Any] = {}
    if ttl is not None:
        metadata["ttl"] = ttl
    if tag is not None:
        metadata["tags"] = tag

    record = await store.set_memory(tenant_id, context_id, {"data": data, "metadata": metadata})
    logger.info(
        "context_written",
        version=record.metadata.version,
        size_bytes=record.metadata.size_bytes,
    )
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=record.to_wire())


@router.delete("/{tenant_id}/{context_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_context(
    tenant_id: str,
    context_id: str,
    store: ContextStore = Depends(get_context_store),
) -> Response:
    """Delete a context. Succeeds when it does not exist."""
    bind_context_key(tenant_id, context_id)
    await store.delete_memory(tenant_id, context_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
