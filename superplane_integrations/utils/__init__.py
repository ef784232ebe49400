"""Helpers shared across integrations."""

from superplane_integrations.utils.embedding import decode_json_body, embed_json
from superplane_integrations.utils.emails import (
    format_sender,
    normalize_email_address,
    parse_email_list,
)
from superplane_integrations.utils.timestamps import (
    format_rfc3339_nano,
    normalize_timestamp_value,
    normalize_unix_timestamp,
    parse_rfc3339,
    text_to_unix_nanos,
    unix_to_nanos,
    utc_now_rfc3339,
)

__all__ = [
    "decode_json_body",
    "embed_json",
    "format_rfc3339_nano",
    "format_sender",
    "normalize_email_address",
    "normalize_timestamp_value",
    "normalize_unix_timestamp",
    "parse_email_list",
    "parse_rfc3339",
    "text_to_unix_nanos",
    "unix_to_nanos",
    "utc_now_rfc3339",
]
