"""Health check endpoint for monitoring and load balancers."""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cortex import __version__
from cortex.observability.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseModel):
    """Health check response.

    Attributes:
        status: healthy or unhealthy
        backend: Name of the storage backend
        message: Optional status message or error details
        version: Application version
    """

    status: str
    backend: str | None = None
    message: str | None = None
    version: str = __version__


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(request: Request) -> JSONResponse:
    """Report storage backend health.

    Returns:
        200 if the backend is reachable, 503 otherwise
    """
    store = getattr(request.app.state, "context_store", None)
    if store is None:
        response = HealthCheckResponse(status="unhealthy", message="Context store not initialized")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response.model_dump()
        )

    backend = store.adapter.name
    try:
        await store.adapter.health_check()
    except Exception as e:
        logger.error("storage_health_check_failed", backend=backend, error=str(e))
        response = HealthCheckResponse(
            status="unhealthy", backend=backend, message=f"Storage error: {e}"
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response.model_dump()
        )

    response = HealthCheckResponse(status="healthy", backend=backend)
    return JSONResponse(status_code=status.HTTP_200_OK, content=response.model_dump())
