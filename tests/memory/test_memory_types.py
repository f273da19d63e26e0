"""Tests for context record types and their wire shape."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from cortex.memory.types import (
    ContextMetadata,
    ContextRecord,
    ContextStoreConfig,
    MetadataOptions,
    serialized_size,
)


class TestSerializedSize:
    def test_matches_compact_json_encoding(self) -> None:
        assert serialized_size({"foo": "bar"}) == 13

    def test_counts_utf8_bytes_without_escaping(self) -> None:
        assert serialized_size("ü") == 4

    def test_rejects_unserialisable_values(self) -> None:
        with pytest.raises(TypeError):
            serialized_size({"when": object()})

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_rejects_non_finite_floats(self, value: float) -> None:
        with pytest.raises(ValueError):
            serialized_size({"score": value})

    def test_floats_are_measured_as_stored(self) -> None:
        assert serialized_size(1.0) == len(json.dumps(1.0)) == 3


class TestContextRecordWireShape:
    def test_to_wire_uses_camel_case_keys(self, record_factory) -> None:
        wire = record_factory("t1", "c1", ttl=60, tags=["a"]).to_wire()

        assert set(wire) == {"tenantId", "contextId", "data", "metadata"}
        assert wire["metadata"] == {
            "createdAt": "2024-01-01T00:00:00Z",
            "updatedAt": "2024-01-01T00:00:00Z",
            "version": 1,
            "ttl": 60,
            "tags": ["a"],
            "sizeBytes": 13,
        }

    def test_unset_optional_metadata_is_omitted(self, record_factory) -> None:
        metadata = record_factory().to_wire()["metadata"]
        assert "ttl" not in metadata
        assert "tags" not in metadata

    def test_none_values_inside_data_are_kept(self, record_factory) -> None:
        wire = record_factory(data={"a": None, "b": [None]}).to_wire()
        assert wire["data"] == {"a": None, "b": [None]}

    def test_extra_metadata_survives_json_round_trip(self, record_factory) -> None:
        record = record_factory(source="import")

        restored = ContextRecord.from_json(record.to_json())

        assert restored == record
        assert restored.metadata.model_extra == {"source": "import"}
        assert json.loads(record.to_json())["metadata"]["source"] == "import"

    def test_from_wire_accepts_snake_case_keys(self) -> None:
        record = ContextRecord.from_wire(
            {
                "tenant_id": "t1",
                "context_id": "c1",
                "data": [1, 2],
                "metadata": {
                    "created_at": "2024-01-01T00:00:00Z",
                    "updated_at": "2024-01-02T00:00:00Z",
                    "version": 3,
                    "size_bytes": 5,
                },
            }
        )
        assert record.metadata.version == 3
        assert record.metadata.updated_at == datetime(2024, 1, 2, tzinfo=timezone.utc)

    def test_from_wire_rejects_missing_metadata(self) -> None:
        with pytest.raises(ValidationError):
            ContextRecord.from_wire({"tenantId": "t1", "contextId": "c1", "data": {}})

    def test_records_are_immutable(self, record_factory) -> None:
        record = record_factory()
        with pytest.raises(ValidationError):
            record.tenant_id = "other"  # type: ignore[misc]


class TestContextMetadata:
    def test_version_starts_at_one(self) -> None:
        now = datetime.now(timezone.utc)
        with pytest.raises(ValidationError):
            ContextMetadata(created_at=now, updated_at=now, version=0, size_bytes=1)


class TestMetadataOptions:
    def test_custom_fields_drop_computed_keys(self) -> None:
        options = MetadataOptions.model_validate(
            {"ttl": 5, "owner": "me", "version": 7, "updatedAt": "x", "size_bytes": 3}
        )
        assert options.ttl == 5
        assert options.custom_fields() == {"owner": "me"}


class TestContextStoreConfig:
    def test_accepts_wire_name(self) -> None:
        assert ContextStoreConfig.model_validate({"defaultTtlSeconds": 10}).default_ttl_seconds == 10

    def test_default_is_no_expiry(self) -> None:
        assert ContextStoreConfig().default_ttl_seconds is None
