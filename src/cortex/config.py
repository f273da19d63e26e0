"""Application configuration for Cortex.

CortexSettings gathers everything the surrounding application needs to
build a ContextStore: which backend to use, how to reach it, the default
TTL, API keys and logging options. Values come from environment variables
via ``CortexSettings.from_env()``.

Environment variables:
    CORTEX_BACKEND: memory | redis | sql | mongodb (default: memory)
    CORTEX_DEFAULT_TTL_SECONDS: default record ttl (unset: no expiry)
    REDIS_URL: Redis connection URL
    DATABASE_URL: async SQLAlchemy URL
    MONGODB_URL, MONGODB_DATABASE: MongoDB connection URL and database name
    CORTEX_API_KEYS: comma-separated ``tenant:key`` pairs (unset: no auth)
    LOG_LEVEL: logging level (default: INFO)
    JSON_LOGS: "true" for JSON logs (default: true)
"""

import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from cortex.memory.types import ContextStoreConfig


class BackendKind(str, Enum):
    """Supported storage backends."""

    MEMORY = "memory"
    REDIS = "redis"
    SQL = "sql"
    MONGODB = "mongodb"


def parse_api_keys(raw: Optional[str]) -> dict[str, str]:
    """Parse ``tenant:key,tenant:key`` into a mapping.

    Args:
        raw: Raw environment value; empty or None yields an empty mapping

    Returns:
        Mapping of tenant id to API key

    Raises:
        ValueError: If an entry is not of the form ``tenant:key``
    """
    keys: dict[str, str] = {}
    if not raw:
        return keys
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        tenant_id, sep, api_key = entry.partition(":")
        if not sep or not tenant_id.strip() or not api_key.strip():
            raise ValueError(f"Invalid API key entry '{entry}', expected 'tenant:key'")
        keys[tenant_id.strip()] = api_key.strip()
    return keys


class CortexSettings(BaseModel):
    """Settings of a Cortex deployment.

    Attributes:
        backend: Storage backend to build
        default_ttl_seconds: TTL for writes that do not specify one
        redis_url: Redis connection URL
        database_url: Async SQLAlchemy database URL
        mongodb_url: MongoDB connection URL
        mongodb_database: MongoDB database name
        api_keys: Tenant id -> API key; empty disables API key checks
        log_level: Logging level name
        json_logs: Emit JSON logs if True
    """

    backend: BackendKind = BackendKind.MEMORY
    default_ttl_seconds: Optional[int] = Field(default=None, ge=0)
    redis_url: str = "redis://localhost:6379/0"
    database_url: str = "sqlite+aiosqlite:///./cortex.db"
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "cortex"
    api_keys: dict[str, str] = Field(default_factory=dict)
    log_level: str = "INFO"
    json_logs: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalise and validate the logging level name."""
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level '{value}'")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CortexSettings":
        """Load settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Validated settings

        Raises:
            pydantic.ValidationError: If a value is invalid
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {
            "backend": env.get("CORTEX_BACKEND", BackendKind.MEMORY.value).lower(),
            "redis_url": env.get("REDIS_URL", "redis://localhost:6379/0"),
            "database_url": env.get("DATABASE_URL", "sqlite+aiosqlite:///./cortex.db"),
            "mongodb_url": env.get("MONGODB_URL", "mongodb://localhost:27017"),
            "mongodb_database": env.get("MONGODB_DATABASE", "cortex"),
            "api_keys": parse_api_keys(env.get("CORTEX_API_KEYS")),
            "log_level": env.get("LOG_LEVEL", "INFO"),
            "json_logs": env.get("JSON_LOGS", "true").lower() == "true",
        }
        ttl = env.get("CORTEX_DEFAULT_TTL_SECONDS")
        if ttl:
            values["default_ttl_seconds"] = ttl
        return cls.model_validate(values)

    def store_config(self) -> ContextStoreConfig:
        """Return the ContextStore configuration derived from these settings."""
        return ContextStoreConfig(default_ttl_seconds=self.default_ttl_seconds)
