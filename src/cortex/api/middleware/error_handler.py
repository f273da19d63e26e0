"""Error handling for the Cortex API.

Converts the context store error taxonomy and request validation errors
into JSON responses with appropriate HTTP status codes:

    InvalidInputError    -> 400
    ContextNotFoundError -> 404
    StorageAdapterError  -> 500
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cortex.memory.errors import CortexError, StorageAdapterError
from cortex.observability.logging import get_logger

logger = get_logger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application.

    Args:
        app: The FastAPI application instance to configure
    """

    @app.exception_handler(CortexError)
    async def handle_cortex_error(request: Request, exc: CortexError) -> JSONResponse:
        """Return the error's status code with its code and message."""
        if isinstance(exc, StorageAdapterError):
            logger.error(
                "storage_adapter_error",
                path=request.url.path,
                operation=exc.operation,
                context_id=exc.context_id,
                cause=repr(exc.cause),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Format request validation errors as a 400 response with field details."""
        errors: list[dict[str, Any]] = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({"field": field, "message": error["msg"]})

        return JSONResponse(
            status_code=400,
            content={
                "code": "validation_error",
                "message": "Request validation failed",
                "errors": errors,
            },
        )

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
        """Log unexpected exceptions and return a generic 500 response."""
        logger.exception("unexpected_error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"code": "internal_error", "message": "An internal server error occurred"},
        )
