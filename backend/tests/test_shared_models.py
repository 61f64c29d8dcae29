"""Tests for shared model utilities."""

import uuid
from datetime import UTC, datetime, timedelta, timezone

import pytest

from app.models.shared import UUIDType, as_utc, coerce_uuid, generate_uuid, utc_now


class TestCoerceUuid:
    def test_passes_uuid_through(self):
        value = uuid.uuid4()
        assert coerce_uuid(value) is value

    def test_parses_strings(self):
        value = uuid.uuid4()
        assert coerce_uuid(str(value)) == value
        assert coerce_uuid(str(value).upper()) == value

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            coerce_uuid("not-a-uuid")


class TestTimestamps:
    def test_utc_now_is_aware(self):
        now = utc_now()
        assert now.tzinfo == UTC
        assert abs((datetime.now(UTC) - now).total_seconds()) < 5

    def test_as_utc_reads_naive_values_as_utc(self):
        stored = datetime(2026, 3, 1, 12, 0)
        assert as_utc(stored) == datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def test_as_utc_converts_other_zones(self):
        stored = datetime(2026, 3, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        result = as_utc(stored)
        assert result.tzinfo == UTC
        assert result.hour == 12


class TestUUIDType:
    def test_generate_uuid_is_v4(self):
        first, second = generate_uuid(), generate_uuid()
        assert first.version == 4
        assert first != second

    def test_bind_param(self):
        uuid_type = UUIDType()
        value = uuid.uuid4()
        assert uuid_type.process_bind_param(None, None) is None
        assert uuid_type.process_bind_param(value, None) == str(value)
        assert uuid_type.process_bind_param(str(value).upper(), None) == str(value)

    def test_result_value(self):
        uuid_type = UUIDType()
        value = uuid.uuid4()
        assert uuid_type.process_result_value(None, None) is None
        assert uuid_type.process_result_value(str(value), None) == value
