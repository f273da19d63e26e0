"""HTTP-level errors raised by the Cortex API.

They extend the memory error hierarchy so a single exception handler maps
every CortexError to its status code.
"""

from cortex.memory.errors import CortexError


class ContextNotFoundError(CortexError):
    """Raised when a requested context does not exist."""

    def __init__(self, tenant_id: str, context_id: str) -> None:
        super().__init__(
            message=f"Context '{context_id}' not found for tenant '{tenant_id}'",
            code="context_not_found",
            status_code=404,
        )
        self.tenant_id = tenant_id
        self.context_id = context_id


class UnauthorizedError(CortexError):
    """Raised when the X-API-Key header is missing."""

    def __init__(self, message: str = "Missing X-API-Key header.") -> None:
        super().__init__(message=message, code="unauthorized", status_code=401)


class ForbiddenError(CortexError):
    """Raised when the API key is not valid for the tenant."""

    def __init__(self, message: str = "Invalid API Key.") -> None:
        super().__init__(message=message, code="forbidden", status_code=403)
