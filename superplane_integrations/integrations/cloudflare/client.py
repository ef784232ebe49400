"""
Cloudflare API Client.

Covers the pieces of the v4 API the components need: zones, DNS records
and the dynamic redirect ruleset.

Usage:
    async with CloudflareClient(CloudflareConfig(api_token="...")) as client:
        zones = await client.list_zones()
        record = await client.create_dns_record(
            zones[0].id,
            DNSRecordCreate(type="A", name="api", content="192.0.2.1", ttl=1),
        )

API Reference:
    https://developers.cloudflare.com/api/
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
import pydantic

from superplane_integrations.integrations.base import (
    IntegrationClient,
    IntegrationConfig,
    IntegrationError,
)
from superplane_integrations.integrations.cloudflare.schemas import (
    CloudflareErrorItem,
    DNSRecord,
    DNSRecordCreate,
    DNSRecordUpdate,
    Envelope,
    RedirectRule,
    RedirectRuleUpdate,
    Ruleset,
    Zone,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"


# =============================================================================
# Errors
# =============================================================================


class CloudflareAPIError(IntegrationError):
    """
    A failed Cloudflare call, carrying the envelope's error list.

    Raised for non-2xx responses and for 2xx responses whose envelope says
    success=false where the caller needs the structured errors.
    """

    def __init__(self, status_code: int, errors: list[CloudflareErrorItem], body: str):
        super().__init__(
            f"request got {status_code} code: {body}",
            "cloudflare",
            status_code=status_code,
            response_body=body,
            retryable=status_code == 429 or status_code >= 500,
        )
        self.errors = errors

    @classmethod
    def from_response(cls, status_code: int, body: str) -> CloudflareAPIError:
        errors: list[CloudflareErrorItem] = []
        try:
            errors = Envelope.model_validate_json(body).errors
        except pydantic.ValidationError:
            pass
        return cls(status_code, errors, body)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class CloudflareConfig(IntegrationConfig):
    """Configuration for Cloudflare client."""

    api_token: str = ""
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self):
        if not self.api_token:
            raise ValueError("Cloudflare API token is required")


# =============================================================================
# Client
# =============================================================================


class CloudflareClient(IntegrationClient):
    """Async client for the Cloudflare v4 API (Bearer token auth)."""

    def __init__(
        self,
        config: CloudflareConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config, transport=transport)
        self._config: CloudflareConfig = config

    @property
    def name(self) -> str:
        return "cloudflare"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.api_token}"}

    def _raise_for_status(self, response: httpx.Response) -> None:
        raise CloudflareAPIError.from_response(response.status_code, response.text)

    def _unwrap(self, response: httpx.Response, *, structured: bool = False) -> Any:
        """
        Return the envelope's result.

        Args:
            structured: Raise CloudflareAPIError (with the error list) on
                success=false instead of a plain IntegrationError
        """
        try:
            envelope = Envelope.model_validate_json(response.content)
        except pydantic.ValidationError as e:
            raise IntegrationError(f"error parsing response: {e}", self.name) from e

        if not envelope.success:
            if structured:
                raise CloudflareAPIError(response.status_code, envelope.errors, response.text)
            raise IntegrationError("API returned success=false", self.name)

        return envelope.result

    # =========================================================================
    # Zones
    # =========================================================================

    async def list_zones(self) -> list[Zone]:
        response = await self._request("GET", "/zones")
        result = self._unwrap(response) or []
        return [Zone.model_validate(zone) for zone in result]

    # =========================================================================
    # DNS Records
    # =========================================================================

    async def list_dns_records(self, zone_id: str) -> list[DNSRecord]:
        response = await self._request("GET", f"/zones/{zone_id}/dns_records")
        result = self._unwrap(response) or []
        return [DNSRecord.model_validate(record) for record in result]

    async def get_dns_record(self, zone_id: str, record_id: str) -> DNSRecord:
        response = await self._request("GET", f"/zones/{zone_id}/dns_records/{record_id}")
        return DNSRecord.model_validate(self._unwrap(response) or {})

    async def create_dns_record(self, zone_id: str, record: DNSRecordCreate) -> DNSRecord:
        """
        Create a DNS record.

        Raises:
            CloudflareAPIError: On non-2xx, and on success=false with the
                envelope errors attached
        """
        logger.info(f"[cloudflare] Creating {record.type} record {record.name} in zone {zone_id}")
        response = await self._request(
            "POST",
            f"/zones/{zone_id}/dns_records",
            json=record.to_api_dict(),
        )
        return DNSRecord.model_validate(self._unwrap(response, structured=True) or {})

    async def update_dns_record(
        self,
        zone_id: str,
        record_id: str,
        record: DNSRecordUpdate,
    ) -> DNSRecord:
        logger.info(f"[cloudflare] Updating DNS record {record_id} in zone {zone_id}")
        response = await self._request(
            "PUT",
            f"/zones/{zone_id}/dns_records/{record_id}",
            json=record.to_api_dict(),
        )
        return DNSRecord.model_validate(self._unwrap(response, structured=True) or {})

    async def delete_dns_record(self, zone_id: str, record_id: str) -> dict[str, Any]:
        logger.info(f"[cloudflare] Deleting DNS record {record_id} in zone {zone_id}")
        response = await self._request("DELETE", f"/zones/{zone_id}/dns_records/{record_id}")
        return self._unwrap(response, structured=True) or {}

    # =========================================================================
    # Rulesets
    # =========================================================================

    async def get_ruleset_for_phase(self, zone_id: str, phase: str) -> Ruleset:
        response = await self._request(
            "GET",
            f"/zones/{zone_id}/rulesets/phases/{phase}/entrypoint",
        )
        return Ruleset.model_validate(self._unwrap(response) or {})

    async def update_redirect_rule(
        self,
        zone_id: str,
        ruleset_id: str,
        rule_id: str,
        rule: RedirectRuleUpdate,
    ) -> RedirectRule:
        """
        Patch one rule of a ruleset.

        The API answers with the whole ruleset; the updated rule is picked
        out by id.
        """
        logger.info(f"[cloudflare] Updating redirect rule {rule_id} in ruleset {ruleset_id}")
        response = await self._request(
            "PATCH",
            f"/zones/{zone_id}/rulesets/{ruleset_id}/rules/{rule_id}",
            json=rule.to_api_dict(),
        )
        ruleset = Ruleset.model_validate(self._unwrap(response) or {})
        for updated in ruleset.rules:
            if updated.id == rule_id:
                return updated

        raise IntegrationError("updated rule not found in response", self.name)
