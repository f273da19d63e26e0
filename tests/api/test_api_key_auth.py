"""Tests for the per-tenant API key check."""

import pytest
from fastapi.testclient import TestClient

from cortex.api.app import create_app
from cortex.api.dependencies import StaticApiKeyValidator
from cortex.config import CortexSettings
from cortex.memory.backends.in_memory import InMemoryStorageAdapter
from cortex.memory.store import ContextStore

VALID_KEYS = {"tenant-123": "api-key-abc", "tenant-456": "api-key-xyz"}


def make_client(**kwargs) -> TestClient:
    app = create_app(store=ContextStore(InMemoryStorageAdapter()), **kwargs)
    return TestClient(app)


class TestStaticApiKeyValidator:
    def test_accepts_matching_key(self) -> None:
        assert StaticApiKeyValidator(VALID_KEYS)("tenant-123", "api-key-abc") is True

    def test_rejects_other_tenants_key(self) -> None:
        assert StaticApiKeyValidator(VALID_KEYS)("tenant-123", "api-key-xyz") is False

    def test_rejects_unknown_tenant(self) -> None:
        assert StaticApiKeyValidator(VALID_KEYS)("tenant-999", "api-key-abc") is False


class TestApiKeyCheck:
    @pytest.fixture
    def client(self) -> TestClient:
        return make_client(settings=CortexSettings(api_keys=VALID_KEYS))

    def test_missing_header_returns_401(self, client: TestClient) -> None:
        response = client.get("/cortex/tenant-123/c1")

        assert response.status_code == 401
        assert response.json()["code"] == "unauthorized"

    def test_wrong_key_returns_403(self, client: TestClient) -> None:
        response = client.get("/cortex/tenant-123/c1", headers={"X-API-Key": "api-key-xyz"})

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_valid_key_reaches_route(self, client: TestClient) -> None:
        headers = {"X-API-Key": "api-key-abc"}

        created = client.post("/cortex/tenant-123/c1", json={"foo": "bar"}, headers=headers)
        fetched = client.get("/cortex/tenant-123/c1", headers=headers)

        assert created.status_code == 201
        assert fetched.status_code == 200

    def test_key_applies_to_delete(self, client: TestClient) -> None:
        assert client.delete("/cortex/tenant-456/c1").status_code == 401

    def test_health_is_not_protected(self, client: TestClient) -> None:
        assert client.get("/health").status_code == 200


class TestCustomValidator:
    def test_async_validator_is_awaited(self) -> None:
        seen = []

        async def validator(tenant_id: str, api_key: str) -> bool:
            seen.append((tenant_id, api_key))
            return api_key == "letmein"

        client = make_client(settings=CortexSettings(), api_key_validator=validator)

        assert client.get("/cortex/t1/c1", headers={"X-API-Key": "nope"}).status_code == 403
        assert client.get("/cortex/t1/c1", headers={"X-API-Key": "letmein"}).status_code == 404
        assert seen == [("t1", "nope"), ("t1", "letmein")]

    def test_no_validator_means_open_access(self) -> None:
        client = make_client(settings=CortexSettings())
        assert client.get("/cortex/t1/c1").status_code == 404
