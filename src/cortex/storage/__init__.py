"""SQLAlchemy persistence for the relational storage backend.

Provides the declarative base, the ORM model for stored contexts and the
async engine/session manager used by ``SqlStorageAdapter``.
"""

from cortex.storage.base_model import Base
from cortex.storage.database import Database, DatabaseConfig
from cortex.storage.models import ContextModel

__all__ = ["Base", "ContextModel", "Database", "DatabaseConfig"]
