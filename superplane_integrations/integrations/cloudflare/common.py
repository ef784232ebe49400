"""Helpers shared by the Cloudflare components."""

from __future__ import annotations

from typing import Any

import httpx

from superplane_integrations.config import integration_config_from_settings
from superplane_integrations.core.context import IntegrationContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.integrations.cloudflare.client import (
    CloudflareAPIError,
    CloudflareClient,
    CloudflareConfig,
)
from superplane_integrations.integrations.cloudflare.schemas import (
    AUTOMATIC_TTL,
    DNS_RECORD_TYPES,
    MAX_TTL,
    MIN_TTL,
    PRIORITY_DNS_RECORD_TYPES,
    PROXYABLE_DNS_RECORD_TYPES,
)

DNS_RECORD_PAYLOAD_TYPE = "cloudflare.dnsRecord"

# API statuses that describe a bad record rather than a broken connection.
FAILURE_STATUS_CODES = (400, 404, 409, 422)


def new_client(
    integration: IntegrationContext,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CloudflareClient:
    """
    Build a client from the integration's apiToken.

    Raises:
        ComponentError: If the token is not configured
    """
    try:
        api_token = integration.get_config("apiToken")
    except ComponentError as e:
        raise ComponentError(f"error creating client: error finding API token: {e}") from e

    try:
        config = integration_config_from_settings(CloudflareConfig(api_token=api_token))
    except ValueError as e:
        raise ComponentError(f"error creating client: {e}") from e
    return CloudflareClient(config, transport=transport)


def resolve_zone_id(value: str, integration: IntegrationContext) -> str:
    """Map a zone id or zone name to the id known from sync, else keep value."""
    if not value:
        return value

    zones = integration.metadata.get("zones") or []
    for zone in zones:
        if not isinstance(zone, dict):
            continue
        if value in (zone.get("id"), zone.get("name")):
            return zone.get("id") or value

    return value


def normalize_record_type(value: str) -> str:
    return value.strip().upper()


def validate_record_type(record_type: str) -> None:
    if record_type not in DNS_RECORD_TYPES:
        raise ComponentError(f"type must be one of {', '.join(DNS_RECORD_TYPES)}")


def validate_record_fields(
    record_type: str,
    *,
    ttl: int | None,
    proxied: bool | None,
    priority: int | None,
) -> None:
    """
    Validate the type-dependent DNS record fields.

    Raises:
        ComponentError: When the TTL is out of range or the type cannot
            carry proxied/priority
    """
    if ttl is not None and ttl != AUTOMATIC_TTL and not MIN_TTL <= ttl <= MAX_TTL:
        raise ComponentError("TTL must be 1 (automatic) or between 60 and 86400 seconds")
    if proxied and record_type not in PROXYABLE_DNS_RECORD_TYPES:
        raise ComponentError("proxied is only supported for A, AAAA, and CNAME records")
    if priority is not None and record_type not in PRIORITY_DNS_RECORD_TYPES:
        raise ComponentError("priority is only supported for MX or SRV records")


def should_emit_failure(error: CloudflareAPIError) -> bool:
    return error.status_code in FAILURE_STATUS_CODES


def failure_payload(error: CloudflareAPIError) -> dict[str, Any]:
    """Payload emitted on the failed channel."""
    payload: dict[str, Any] = {
        "error": error.errors[0].message if error.errors else str(error),
        "statusCode": error.status_code,
    }
    if error.errors:
        payload["errors"] = [{"code": e.code, "message": e.message} for e in error.errors]
    return payload
