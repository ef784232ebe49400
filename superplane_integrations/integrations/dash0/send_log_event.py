"""
Send Log Event component.

Turns up to 50 configured records into one OTLP/JSON logs request and
posts it to the Dash0 ingest endpoint.

OTLP/JSON Reference:
    https://opentelemetry.io/docs/specs/otlp/#json-protobuf-encoding
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.dash0.common import new_client
from superplane_integrations.utils import text_to_unix_nanos, unix_to_nanos

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "dash0.log.event.sent"
MAX_RECORDS = 50
DEFAULT_SERVICE_NAME = "superplane.workflow"
SCOPE_NAME = "superplane.workflow"

SEVERITY_NUMBERS = {
    "TRACE": 1,
    "DEBUG": 5,
    "INFO": 9,
    "WARN": 13,
    "ERROR": 17,
    "FATAL": 21,
}


class LogRecordConfig(ComponentConfig):
    message: str = ""
    severity: str = ""
    timestamp: str | int | float | None = None
    attributes: dict[str, Any] | None = None


class SendLogEventConfig(ComponentConfig):
    service_name: str = ""
    records: list[LogRecordConfig] = []


def parse_record_timestamp(value: str | int | float | None) -> int:
    """
    Return the record time in unix nanoseconds.

    Blank values (and the "nil" placeholders expressions render) mean now.
    Unix numbers are read as seconds, milliseconds or nanoseconds by size.

    Raises:
        ValueError: For text that is neither a timestamp nor a number, or a
            non-finite number
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"unsupported timestamp value {value}")
        return unix_to_nanos(int(value))

    trimmed = str(value or "").strip()
    if not trimmed or trimmed.lower() in ("nil", "<nil>"):
        return time.time_ns()

    try:
        return text_to_unix_nanos(trimmed)
    except ValueError:
        pass

    try:
        number = int(trimmed)
    except ValueError:
        try:
            number = int(float(trimmed))
        except (ValueError, OverflowError):
            raise ValueError(f'unsupported timestamp format "{trimmed}"') from None
    return unix_to_nanos(number)


def normalize_severity(value: str) -> tuple[str, int]:
    text = value.strip().upper()
    if text == "WARNING":
        text = "WARN"
    text = text or "INFO"
    if text not in SEVERITY_NUMBERS:
        return "INFO", SEVERITY_NUMBERS["INFO"]
    return text, SEVERITY_NUMBERS[text]


def otlp_any_value(value: Any) -> dict[str, Any]:
    """Encode a Python value as an OTLP AnyValue."""
    if value is None:
        return {"stringValue": ""}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, bool):
        return {"boolValue": value}
    if isinstance(value, int):
        return {"intValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [otlp_any_value(v) for v in value]}}
    if isinstance(value, dict):
        return {
            "kvlistValue": {
                "values": [
                    {"key": key, "value": otlp_any_value(entry)}
                    for key, entry in value.items()
                    if str(key).strip()
                ]
            }
        }
    return {"stringValue": str(value)}


def validate_config(config: SendLogEventConfig, scope: str) -> None:
    if not config.records:
        raise ComponentError(f"{scope}: records is required")
    if len(config.records) > MAX_RECORDS:
        raise ComponentError(f"{scope}: records cannot exceed {MAX_RECORDS}")

    for index, record in enumerate(config.records):
        record_scope = f"{scope}: record[{index}]"
        if not record.message.strip():
            raise ComponentError(f"{record_scope}: message is required")
        try:
            parse_record_timestamp(record.timestamp)
        except ValueError as e:
            raise ComponentError(f"{record_scope}: invalid timestamp: {e}") from e


def build_logs_request(config: SendLogEventConfig) -> tuple[dict[str, Any], str]:
    """Build the OTLP/JSON request body; returns it with the service name used."""
    service_name = config.service_name.strip() or DEFAULT_SERVICE_NAME

    log_records = []
    for record in config.records:
        severity_text, severity_number = normalize_severity(record.severity)
        attributes = [
            {"key": key.strip(), "value": otlp_any_value(value)}
            for key, value in (record.attributes or {}).items()
            if key.strip()
        ]
        log_records.append(
            {
                "timeUnixNano": str(parse_record_timestamp(record.timestamp)),
                "severityText": severity_text,
                "severityNumber": severity_number,
                "body": {"stringValue": record.message},
                "attributes": attributes,
            }
        )

    request = {
        "resourceLogs": [
            {
                "resource": {
                    "attributes": [
                        {"key": "service.name", "value": {"stringValue": service_name}},
                    ]
                },
                "scopeLogs": [
                    {
                        "scope": {"name": SCOPE_NAME},
                        "logRecords": log_records,
                    }
                ],
            }
        ]
    }
    return request, service_name


class SendLogEvent(Component):
    @property
    def name(self) -> str:
        return "dash0.sendLogEvent"

    @property
    def label(self) -> str:
        return "Send Log Event"

    @property
    def description(self) -> str:
        return "Send log records to Dash0 over OTLP"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(SendLogEventConfig, ctx.configuration)
        validate_config(config, "dash0.sendLogEvent setup")

    async def execute(self, ctx: ExecutionContext) -> None:
        scope = "dash0.sendLogEvent execute"
        config = decode_configuration(SendLogEventConfig, ctx.configuration)
        validate_config(config, scope)
        request, service_name = build_logs_request(config)

        try:
            client = new_client(ctx.integration, ctx.transport)
        except ComponentError as e:
            raise ComponentError(f"{scope}: create client: {e}") from e

        async with client:
            try:
                response = await client.send_log_events(request)
            except IntegrationError as e:
                raise ComponentError(f"{scope}: send log events: {e}") from e

        logger.info(f"[dash0] Sent {len(config.records)} log records for {service_name}")
        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            PAYLOAD_TYPE,
            [
                {
                    "serviceName": service_name,
                    "sentCount": len(config.records),
                    "response": response,
                }
            ],
        )
