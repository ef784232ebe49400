"""
Pydantic schemas for the Cloudflare v4 API.

Cloudflare wraps every response in an envelope:
    {"success": bool, "errors": [{"code", "message"}], "result": ...}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Constants
# =============================================================================

DNS_RECORD_TYPES = ("A", "AAAA", "CAA", "CNAME", "MX", "NS", "SRV", "TXT")
PROXYABLE_DNS_RECORD_TYPES = ("A", "AAAA", "CNAME")
PRIORITY_DNS_RECORD_TYPES = ("MX", "SRV")

AUTOMATIC_TTL = 1
MIN_TTL = 60
MAX_TTL = 86400

REDIRECT_PHASE = "http_request_dynamic_redirect"
REDIRECT_STATUS_CODES = (301, 302, 307, 308)


# =============================================================================
# Envelope
# =============================================================================


class CloudflareErrorItem(BaseModel):
    code: int = 0
    message: str = ""


class Envelope(BaseModel):
    success: bool = False
    errors: list[CloudflareErrorItem] = Field(default_factory=list)
    result: Any = None


# =============================================================================
# Zones
# =============================================================================


class Zone(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    status: str = ""


# =============================================================================
# DNS Records
# =============================================================================


class DNSRecord(BaseModel):
    """A DNS record as returned by the API."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    type: str = ""
    name: str = ""
    content: str = ""
    ttl: int = AUTOMATIC_TTL
    proxied: bool = False
    priority: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "content": self.content,
            "proxied": self.proxied,
            "ttl": self.ttl,
        }
        if self.priority is not None:
            payload["priority"] = self.priority
        return payload


class DNSRecordCreate(BaseModel):
    """Body of POST /zones/{zone}/dns_records."""

    type: str
    name: str
    content: str
    ttl: int | None = None
    proxied: bool | None = None
    priority: int | None = None

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DNSRecordUpdate(BaseModel):
    """Body of PUT /zones/{zone}/dns_records/{id} (full replacement)."""

    type: str
    name: str
    content: str
    ttl: int = AUTOMATIC_TTL
    proxied: bool = False
    priority: int | None = None

    def to_api_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


# =============================================================================
# Rulesets
# =============================================================================


class RedirectTargetURL(BaseModel):
    value: str | None = None
    expression: str | None = None


class RedirectFromValue(BaseModel):
    status_code: int
    target_url: RedirectTargetURL | None = None
    preserve_query_string: bool | None = None


class RedirectActionParameters(BaseModel):
    from_value: RedirectFromValue | None = None


class RedirectRule(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    action: str = ""
    expression: str = ""
    description: str | None = None
    enabled: bool = False
    action_parameters: RedirectActionParameters | None = None


class RedirectRuleUpdate(BaseModel):
    """Body of PATCH /zones/{zone}/rulesets/{ruleset}/rules/{rule}."""

    action: str = "redirect"
    expression: str
    description: str | None = None
    enabled: bool
    action_parameters: RedirectActionParameters | None = None

    def to_api_dict(self) -> dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        if not data.get("description"):
            data.pop("description", None)
        from_value = data.get("action_parameters", {}).get("from_value", {})
        if from_value.get("preserve_query_string") is False:
            from_value.pop("preserve_query_string")
        return data


class Ruleset(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = ""
    description: str = ""
    kind: str = ""
    phase: str = ""
    rules: list[RedirectRule] = Field(default_factory=list)
