"""
Timestamp helpers.

Webhook senders disagree on how they encode time: RFC 3339 strings, plain
"YYYY-MM-DD HH:MM:SS" strings, or unix numbers in seconds, milliseconds
or nanoseconds. Everything is normalized to RFC 3339 in UTC with
nanosecond precision and trailing fractional zeros removed.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime, timedelta, timezone
from typing import Any

_NANOS_THRESHOLD = 1_000_000_000_000_000_000
_MILLIS_THRESHOLD = 1_000_000_000_000

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?(Z|[+-]\d{2}:\d{2})$",
    re.IGNORECASE,
)
_PLAIN = re.compile(r"^(\d{4})-(\d{2})-(\d{2}) (\d{2}):(\d{2}):(\d{2})$")
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def format_rfc3339_nano(moment: datetime, nanos: int | None = None) -> str:
    """
    Format a datetime as RFC 3339 in UTC.

    nanos overrides the sub-second part (0..999_999_999) for callers that
    hold more precision than datetime can carry.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)
    if nanos is None:
        nanos = moment.microsecond * 1000

    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")
    return text + "Z"


def normalize_unix_timestamp(value: int) -> str:
    """Infer seconds/milliseconds/nanoseconds from magnitude and format."""
    if value >= _NANOS_THRESHOLD:
        seconds, nanos = divmod(value, 1_000_000_000)
    elif value >= _MILLIS_THRESHOLD:
        seconds, millis = divmod(value, 1000)
        nanos = millis * 1_000_000
    else:
        seconds, nanos = value, 0
    try:
        moment = _EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        return ""
    return format_rfc3339_nano(moment, nanos)


def _parse_parts(value: str) -> tuple[datetime, int] | None:
    """Split a textual timestamp into a whole-second datetime and nanoseconds."""
    match = _RFC3339.match(value)
    if match:
        year, month, day, hour, minute, second, fraction, offset = match.groups()
        if offset.upper() == "Z":
            tz = UTC
        else:
            sign = -1 if offset[0] == "-" else 1
            hours, minutes = offset[1:].split(":")
            tz = timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))
        try:
            moment = datetime(
                int(year), int(month), int(day), int(hour), int(minute), int(second), tzinfo=tz
            )
        except ValueError:
            return None
        return moment, int((fraction or "").ljust(9, "0"))

    match = _PLAIN.match(value)
    if match:
        try:
            moment = datetime(*(int(part) for part in match.groups()), tzinfo=UTC)
        except ValueError:
            return None
        return moment, 0

    return None


def _parse_string(value: str) -> str | None:
    parts = _parse_parts(value)
    if parts is None:
        return None
    return format_rfc3339_nano(*parts)


def unix_to_nanos(value: int) -> int:
    """Convert a unix number of inferred unit into nanoseconds."""
    if value >= _NANOS_THRESHOLD:
        return value
    if value >= _MILLIS_THRESHOLD:
        return value * 1_000_000
    return value * 1_000_000_000


def text_to_unix_nanos(value: str) -> int:
    """
    Parse RFC 3339 or "YYYY-MM-DD HH:MM:SS" text into unix nanoseconds.

    Raises:
        ValueError: If the text matches neither layout
    """
    parts = _parse_parts(value.strip())
    if parts is None:
        raise ValueError(f"invalid timestamp: {value!r}")
    moment, nanos = parts
    seconds = (moment.astimezone(UTC) - _EPOCH) // timedelta(seconds=1)
    return seconds * 1_000_000_000 + nanos


def normalize_timestamp_value(value: Any) -> str:
    """
    Normalize a timestamp of unknown shape, or return "" when unusable.

    Unparseable non-empty strings are returned trimmed and unchanged.
    """
    if isinstance(value, bool):
        return ""
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return ""
        parsed = _parse_string(trimmed)
        if parsed is not None:
            return parsed
        if re.fullmatch(r"[+-]?\d+", trimmed):
            return normalize_unix_timestamp(int(trimmed))
        return trimmed
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        return normalize_unix_timestamp(int(value))
    if isinstance(value, int):
        return normalize_unix_timestamp(value)
    return ""


def utc_now_rfc3339() -> str:
    return format_rfc3339_nano(datetime.now(UTC))


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware datetime.

    Raises:
        ValueError: If the value is not RFC 3339
    """
    normalized = _parse_string(value.strip())
    if normalized is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {value!r}")
    head, _, fraction = normalized[:-1].partition(".")
    moment = datetime.strptime(head, "%Y-%m-%dT%H:%M:%S").replace(tzinfo=UTC)
    if fraction:
        moment = moment.replace(microsecond=int(fraction.ljust(9, "0")[:6]))
    return moment
