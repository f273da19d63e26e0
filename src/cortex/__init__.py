"""Cortex: a multi-tenant, versioned context store.

Callers persist, retrieve and delete JSON-shaped context records addressed
by ``(tenant_id, context_id)`` through an interchangeable storage backend.
"""

__version__ = "0.1.0"
