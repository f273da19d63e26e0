"""SQLAlchemy ORM models for context persistence."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from cortex.storage.base_model import Base

CONTEXT_TABLE_NAME = "cortex_contexts"


class ContextModel(Base):
    """ORM model for stored context records.

    The whole wire record (identity, data and metadata) is kept in one JSON
    column; the identity columns form the composite primary key.

    Attributes:
        tenant_id: Tenant namespace
        context_id: Context identifier within the tenant
        data: Record in wire shape
    """

    __tablename__ = CONTEXT_TABLE_NAME

    tenant_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    context_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
