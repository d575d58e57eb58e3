"""Tests for records."""

from datetime import datetime, timedelta, timezone

import pytest

from deta_client.errors import BuilderValidationError, EncodingError
from deta_client.records import Record


class TestRecord:
    """Test record encoding and expiry rules."""

    def test_full_record(self):
        """Test key, value and relative expiry encode."""
        record = Record(value={"name": "Jane"}, key="u1", expires_in=300)
        assert record.to_wire() == {"key": "u1", "value": {"name": "Jane"}, "expires_in": 300}

    def test_optional_fields_omitted(self):
        """Test unset fields are left out."""
        assert Record(value=[1, 2]).to_wire() == {"value": [1, 2]}

    def test_both_expiries_rejected(self):
        """Test expires_at and expires_in cannot be combined."""
        with pytest.raises(BuilderValidationError):
            Record(value=1, expires_at=1700000000, expires_in=60)

    def test_aware_datetime_expiry(self):
        """Test aware datetimes encode as epoch seconds."""
        at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert Record(value=1, expires_at=at).to_wire()["expires_at"] == 1704067200

    def test_naive_datetime_is_utc(self):
        """Test naive datetimes are read as UTC."""
        assert Record(value=1, expires_at=datetime(2024, 1, 1)).to_wire()["expires_at"] == 1704067200

    def test_offset_datetime_expiry(self):
        """Test non-UTC offsets are converted."""
        at = datetime(2024, 1, 1, 2, tzinfo=timezone(timedelta(hours=2)))
        assert Record(value=1, expires_at=at).to_wire()["expires_at"] == 1704067200

    def test_epoch_expiry(self):
        """Test integer expiries pass through."""
        assert Record(value=1, expires_at=1704067200).to_wire()["expires_at"] == 1704067200

    @pytest.mark.parametrize("value", [0, -5, True, 1.5, "60"])
    def test_invalid_expires_in(self, value):
        """Test expires_in must be a positive int."""
        with pytest.raises(BuilderValidationError):
            Record(value=1, expires_in=value)

    @pytest.mark.parametrize("value", ["tomorrow", 1.5, False])
    def test_invalid_expires_at(self, value):
        """Test expires_at must be a datetime or int."""
        with pytest.raises(BuilderValidationError):
            Record(value=1, expires_at=value)

    def test_empty_key_rejected(self):
        """Test keys must be non-empty strings."""
        with pytest.raises(BuilderValidationError):
            Record(value=1, key="")

    def test_unencodable_value(self):
        """Test the value must be encodable."""
        with pytest.raises(EncodingError):
            Record(value={"bad": float("nan")}).to_wire()
