"""
Tests for shared helpers: email lists, JSON embedding, timestamps.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

import pytest
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from superplane_integrations.utils import (
    decode_json_body,
    embed_json,
    format_rfc3339_nano,
    format_sender,
    normalize_email_address,
    normalize_timestamp_value,
    normalize_unix_timestamp,
    parse_email_list,
    parse_rfc3339,
    text_to_unix_nanos,
    unix_to_nanos,
)

# =============================================================================
# Email Tests
# =============================================================================


class TestParseEmailList:
    """Tests for parse_email_list()."""

    def test_separators(self):
        """Commas, semicolons and newlines all separate entries."""
        value = "a@example.com, b@example.com;c@example.com\nd@example.com"
        assert parse_email_list(value) == [
            "a@example.com",
            "b@example.com",
            "c@example.com",
            "d@example.com",
        ]

    def test_list_input(self):
        assert parse_email_list(["a@example.com", " b@example.com "]) == [
            "a@example.com",
            "b@example.com",
        ]

    def test_blanks_and_invalid_dropped(self):
        assert parse_email_list(" , not-an-email, a@example.com ,") == ["a@example.com"]

    def test_duplicates_removed(self):
        """Duplicates are detected case-insensitively, first spelling kept."""
        assert parse_email_list("A@example.com, a@example.com") == ["A@example.com"]

    def test_none(self):
        assert parse_email_list(None) == []


class TestNormalizeEmailAddress:
    def test_display_name(self):
        assert normalize_email_address("Jane Doe <jane@example.com>") == "jane@example.com"

    def test_invalid(self):
        assert normalize_email_address("jane") == ""
        assert normalize_email_address("@example.com") == ""


def test_format_sender():
    assert format_sender("ops@example.com") == "ops@example.com"
    assert format_sender("ops@example.com", "Ops") == "Ops <ops@example.com>"


# =============================================================================
# Embedding Tests
# =============================================================================


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    record_id: str
    ttl: int | None = None


@dataclass
class Point:
    x: int
    y: int


class TestEmbedJson:
    def test_pydantic_model(self):
        """Models dump by alias with None fields dropped."""
        assert embed_json(Record(record_id="r1")) == {"recordId": "r1"}

    def test_nested_values(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        value = {"points": (Point(1, 2),), "at": moment, "raw": b"ok"}
        assert embed_json(value) == {
            "points": [{"x": 1, "y": 2}],
            "at": "2024-01-02T03:04:05+00:00",
            "raw": "ok",
        }


class TestDecodeJsonBody:
    def test_empty_body(self):
        assert decode_json_body(b"  ") == {}

    def test_array_wrapped(self):
        assert decode_json_body(b"[1, 2]") == {"items": [1, 2]}

    def test_object(self):
        assert decode_json_body('{"a": 1}') == {"a": 1}


# =============================================================================
# Timestamp Tests
# =============================================================================


class TestNormalizeUnixTimestamp:
    """Unit is inferred from magnitude."""

    def test_seconds(self):
        assert normalize_unix_timestamp(1_700_000_000) == "2023-11-14T22:13:20Z"

    def test_milliseconds(self):
        assert normalize_unix_timestamp(1_700_000_000_123) == "2023-11-14T22:13:20.123Z"

    def test_nanoseconds(self):
        assert normalize_unix_timestamp(1_700_000_000_000_000_001) == "2023-11-14T22:13:20.000000001Z"


class TestNormalizeTimestampValue:
    def test_rfc3339_with_offset(self):
        """Offsets are converted to UTC."""
        assert normalize_timestamp_value("2024-05-01T12:00:00+02:00") == "2024-05-01T10:00:00Z"

    def test_plain_layout(self):
        assert normalize_timestamp_value("2024-05-01 12:00:00") == "2024-05-01T12:00:00Z"

    def test_numeric_string(self):
        assert normalize_timestamp_value("1700000000") == "2023-11-14T22:13:20Z"

    def test_float(self):
        assert normalize_timestamp_value(1_700_000_000.9) == "2023-11-14T22:13:20Z"

    def test_unparseable_string_kept(self):
        assert normalize_timestamp_value("  yesterday ") == "yesterday"

    def test_unusable_values(self):
        assert normalize_timestamp_value(True) == ""
        assert normalize_timestamp_value(None) == ""
        assert normalize_timestamp_value("") == ""

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_floats(self, value):
        """Infinite and NaN numbers are unusable, not an error."""
        assert normalize_timestamp_value(value) == ""


class TestUnixNanos:
    def test_unix_to_nanos(self):
        assert unix_to_nanos(1_700_000_000) == 1_700_000_000_000_000_000
        assert unix_to_nanos(1_700_000_000_123) == 1_700_000_000_123_000_000
        assert unix_to_nanos(1_700_000_000_000_000_001) == 1_700_000_000_000_000_001

    def test_text_to_unix_nanos(self):
        assert text_to_unix_nanos("2023-11-14T22:13:20.5Z") == 1_700_000_000_500_000_000

    def test_text_to_unix_nanos_invalid(self):
        with pytest.raises(ValueError, match="invalid timestamp"):
            text_to_unix_nanos("not a time")


class TestRfc3339:
    def test_format_trims_zeros(self):
        moment = datetime(2024, 1, 1, tzinfo=UTC)
        assert format_rfc3339_nano(moment) == "2024-01-01T00:00:00Z"
        assert format_rfc3339_nano(moment, 120_000_000) == "2024-01-01T00:00:00.12Z"

    def test_parse(self):
        parsed = parse_rfc3339("2024-01-01T00:00:00.250Z")
        assert parsed == datetime(2024, 1, 1, 0, 0, 0, 250_000, tzinfo=UTC)

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_rfc3339("2024-01-01")
