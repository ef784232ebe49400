"""
On Alert Event trigger.

Dash0 notification channels POST {"data": {...}} when a check fires or
resolves. The event body is not fixed: depending on the channel version
and the check type the same fact lives under different keys, so every
field is looked up along a list of dotted paths and the first non-empty
hit wins.
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic

from superplane_integrations.core.context import TriggerContext, WebhookRequestContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import WebhookResult
from superplane_integrations.core.plugin import ComponentConfig, Trigger, decode_configuration
from superplane_integrations.integrations.dash0.schemas import (
    AlertEventPayload,
    AlertWebhookPayload,
)
from superplane_integrations.utils import embed_json, normalize_timestamp_value, utc_now_rfc3339

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "dash0.alert.event"
EVENT_FIRED = "fired"
EVENT_RESOLVED = "resolved"

EVENT_TYPE_SYNONYMS = {
    EVENT_FIRED: (
        "fired", "fire", "triggered", "trigger", "open", "opened",
        "active", "alert", "failing", "failed",
    ),
    EVENT_RESOLVED: (
        "resolved", "resolve", "recovered", "recovery", "ok", "closed",
        "clear", "cleared", "normal",
    ),
}

EVENT_TYPE_PATHS = (
    "eventType", "event_type", "event.type", "type", "status", "state",
    "alert.state", "alert.status", "data.eventType", "data.event_type", "data.state",
)
CHECK_ID_PATHS = (
    "check.id", "checkId", "check_id", "check.ruleId", "check.rule_id",
    "checkRuleId", "check_rule_id", "alert.checkId", "alert.check_id",
    "data.check.id", "data.checkId", "id",
)
CHECK_NAME_PATHS = (
    "check.name", "checkName", "check_name", "check.ruleName",
    "check_rule_name", "ruleName", "title",
)
SEVERITY_PATHS = ("check.severity", "severity", "alert.severity", "labels.severity")
SUMMARY_PATHS = ("check.summary", "summary", "title")
DESCRIPTION_PATHS = ("check.description", "description", "message")
LABELS_PATHS = ("check.labels", "labels", "alert.labels", "data.labels")
TIMESTAMP_PATHS = (
    "timestamp", "time", "event.timestamp", "eventTime", "alert.timestamp",
    "firedAt", "resolvedAt", "createdAt", "updatedAt",
)


class OnAlertEventConfig(ComponentConfig):
    event_types: list[str] = []


# =============================================================================
# Normalization
# =============================================================================


_MISSING = object()


def find_nested_value(data: dict[str, Any], path: str) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def find_nested_string(data: dict[str, Any], *paths: str) -> str:
    """First non-blank string (or number, stringified) found along paths."""
    for path in paths:
        value = find_nested_value(data, path)
        if isinstance(value, bool):
            continue
        if isinstance(value, str):
            if value.strip():
                return value.strip()
        elif isinstance(value, int):
            return str(value)
        elif isinstance(value, float):
            return str(int(value)) if value.is_integer() else repr(value)
    return ""


def find_nested_map(data: dict[str, Any], *paths: str) -> dict[str, Any] | None:
    for path in paths:
        value = find_nested_value(data, path)
        if isinstance(value, dict):
            return value
    return None


def normalize_event_type(value: str) -> str:
    normalized = value.strip().lower()
    for event_type, synonyms in EVENT_TYPE_SYNONYMS.items():
        if normalized in synonyms:
            return event_type
    return ""


def extract_timestamp(event: dict[str, Any]) -> str:
    for path in TIMESTAMP_PATHS:
        value = find_nested_value(event, path)
        if value is _MISSING:
            continue
        parsed = normalize_timestamp_value(value)
        if parsed:
            return parsed
    return utc_now_rfc3339()


def normalize_alert_event(event: dict[str, Any]) -> AlertEventPayload:
    """Map a raw Dash0 alert event onto the canonical payload."""
    return AlertEventPayload(
        event_type=normalize_event_type(find_nested_string(event, *EVENT_TYPE_PATHS)),
        check_id=find_nested_string(event, *CHECK_ID_PATHS),
        check_name=find_nested_string(event, *CHECK_NAME_PATHS),
        severity=find_nested_string(event, *SEVERITY_PATHS).lower(),
        labels=find_nested_map(event, *LABELS_PATHS) or {},
        summary=find_nested_string(event, *SUMMARY_PATHS),
        description=find_nested_string(event, *DESCRIPTION_PATHS),
        timestamp=extract_timestamp(event),
        event=event,
    )


# =============================================================================
# Trigger
# =============================================================================


class OnAlertEvent(Trigger):
    """Starts a workflow when a Dash0 check fires or resolves."""

    @property
    def name(self) -> str:
        return "dash0.onAlertEvent"

    @property
    def label(self) -> str:
        return "On Alert Event"

    @property
    def description(self) -> str:
        return "Listen to Dash0 alert fired and resolved events"

    async def setup(self, ctx: TriggerContext) -> None:
        scope = "dash0.onAlertEvent setup"
        config = decode_configuration(OnAlertEventConfig, ctx.configuration)
        if not config.event_types:
            raise ComponentError(f"{scope}: at least one event type must be selected")

        ctx.integration.request_webhook({"eventTypes": config.event_types})

    async def handle_webhook(self, ctx: WebhookRequestContext) -> WebhookResult:
        scope = "dash0.onAlertEvent webhook"
        try:
            config = decode_configuration(OnAlertEventConfig, ctx.configuration)
        except ComponentError as e:
            return WebhookResult.fail(500, f"{scope}: decode configuration: {e}")

        if not ctx.body:
            return WebhookResult.fail(400, f"{scope}: empty request body")

        try:
            webhook = AlertWebhookPayload.model_validate_json(ctx.body)
        except pydantic.ValidationError as e:
            return WebhookResult.fail(400, f"{scope}: parse request body: {e}")

        event = normalize_alert_event(webhook.data or {})
        if not event.event_type:
            logger.info("[dash0] Ignoring alert event without a recognizable event type")
            return WebhookResult.ok()

        if config.event_types and event.event_type not in config.event_types:
            logger.info(f"[dash0] Ignoring {event.event_type} alert event, not selected")
            return WebhookResult.ok()

        if not event.check_id:
            return WebhookResult.fail(400, f"{scope}: check id is required")

        ctx.events.emit(PAYLOAD_TYPE, embed_json(event))
        return WebhookResult.ok()
