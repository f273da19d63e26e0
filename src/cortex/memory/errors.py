"""Custom exceptions for the memory module.

This module defines the exception hierarchy for context store errors,
providing structured error handling with status codes and error codes.
Absence of a record is not an error: ``ContextStore.get_memory`` returns
None for missing keys.
"""

from typing import Optional


class CortexError(Exception):
    """Base exception for all context store errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status code for API responses
    """

    def __init__(self, message: str, code: str, status_code: int) -> None:
        """Initialize cortex error.

        Args:
            message: Human-readable error description
            code: Machine-readable error code
            status_code: HTTP status code (400, 500, etc.)
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class InvalidInputError(CortexError):
    """Raised when caller-supplied identifiers or payload are invalid.

    Always raised before any storage backend call is made. Never retryable.
    """

    def __init__(self, message: str) -> None:
        """Initialize invalid input error.

        Args:
            message: Description of the violated precondition
        """
        super().__init__(message=message, code="invalid_input", status_code=400)


class StorageAdapterError(CortexError):
    """Raised when a storage backend operation fails.

    The original failure is kept on ``cause`` and is also chained as
    ``__cause__`` when raised with ``raise ... from``.
    """

    def __init__(
        self,
        message: str,
        cause: object,
        operation: Optional[str] = None,
        tenant_id: Optional[str] = None,
        context_id: Optional[str] = None,
    ) -> None:
        """Initialize storage adapter error.

        Args:
            message: Description of the failed operation
            cause: The original failure; non-exceptions are wrapped in Exception
            operation: Name of the failed operation (get, set, delete, ...)
            tenant_id: Tenant of the affected record, if known
            context_id: Context id of the affected record, if known
        """
        super().__init__(message=message, code="storage_adapter_error", status_code=500)
        self.cause: BaseException = (
            cause if isinstance(cause, BaseException) else Exception(str(cause))
        )
        self.operation = operation
        self.tenant_id = tenant_id
        self.context_id = context_id
