"""Declarative base for Cortex ORM models."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Deterministic constraint names keep schemas identical across SQLite and Postgres
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for Cortex ORM models.

    ``Database.create_tables`` creates every table registered on
    ``Base.metadata``.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
