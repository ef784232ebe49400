"""
Pydantic models for Dash0 API payloads.

Dash0 answers list endpoints in several shapes (bare id lists, object
lists, {"items": [...]} or {"data": [...]} envelopes), so the list models
carry only the identifying fields and are built by the client's parsers.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Dash0Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


# =============================================================================
# Configuration API
# =============================================================================


class CheckRule(Dash0Model):
    """A check rule as returned by the alerting API."""

    id: str = ""
    origin: str = ""
    name: str = ""


class SyntheticCheck(Dash0Model):
    """A synthetic check as returned by the synthetic-checks API."""

    id: str = ""
    origin: str = ""
    name: str = ""


# =============================================================================
# Prometheus API
# =============================================================================


class PrometheusResponse(Dash0Model):
    status: str = ""
    data: Any = None
    error_type: str | None = None
    error: str | None = None


# =============================================================================
# Webhooks
# =============================================================================


class AlertWebhookPayload(Dash0Model):
    """Envelope of an alert notification webhook."""

    data: dict[str, Any] | None = None


class AlertEventPayload(Dash0Model):
    """Normalized alert event emitted by the OnAlertEvent trigger."""

    event_type: str = ""
    check_id: str = ""
    check_name: str = ""
    severity: str = ""
    labels: dict[str, Any] = Field(default_factory=dict)
    summary: str = ""
    description: str = ""
    timestamp: str = ""
    event: dict[str, Any] = Field(default_factory=dict)
