"""
Conversion of response objects into JSON-compatible payloads.

Emitted payloads are stored by the workflow engine as JSON, so every
component passes what it emits through embed_json() first.
"""

from __future__ import annotations

import dataclasses
import json
from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel


def embed_json(value: Any) -> Any:
    """
    Convert a value into plain dicts, lists and scalars.

    Handles pydantic models (dumped by alias, None fields dropped),
    dataclasses, enums, datetimes, UUIDs, bytes and nested containers.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BaseModel):
        return embed_json(value.model_dump(mode="json", by_alias=True, exclude_none=True))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: embed_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return embed_json(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, dict):
        return {str(k): embed_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [embed_json(v) for v in value]
    return str(value)


def decode_json_body(body: bytes | str) -> Any:
    """
    Decode a response body, mapping an empty body to {} and a top-level
    array to {"items": [...]}.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not body.strip():
        return {}
    parsed = json.loads(body)
    if isinstance(parsed, list):
        return {"items": parsed}
    return parsed
