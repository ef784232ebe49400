"""Report Metric component."""

from __future__ import annotations

import logging
import time
from typing import Any

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.newrelic.common import new_client
from superplane_integrations.integrations.newrelic.schemas import (
    METRIC_TYPE_GAUGE,
    METRIC_TYPE_SUMMARY,
    METRIC_TYPES,
    Metric,
    MetricBatch,
)
from superplane_integrations.utils import text_to_unix_nanos

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "newrelic.metric"
SUMMARY_FIELDS = ("count", "sum", "min", "max")


class ReportMetricConfig(ComponentConfig):
    metric_name: str = ""
    metric_type: str = METRIC_TYPE_GAUGE
    value: float | dict[str, Any] | None = None
    interval_ms: int | None = None
    attributes: dict[str, Any] | None = None
    common_attributes: dict[str, Any] | None = None
    timestamp: int | str | None = None


def _validate(config: ReportMetricConfig) -> str:
    if not config.metric_name.strip():
        raise ComponentError("metricName is required")

    metric_type = config.metric_type.strip().lower()
    if metric_type not in METRIC_TYPES:
        raise ComponentError(
            f"invalid metricType: {config.metric_type} (expected one of {', '.join(METRIC_TYPES)})"
        )

    if metric_type != METRIC_TYPE_GAUGE and not config.interval_ms:
        raise ComponentError(f"intervalMs is required for {metric_type} metrics")
    if config.interval_ms is not None and config.interval_ms < 0:
        raise ComponentError("intervalMs cannot be negative")

    if config.value is None:
        raise ComponentError("value is required")
    if isinstance(config.value, dict):
        if metric_type != METRIC_TYPE_SUMMARY:
            raise ComponentError(f"value must be a number for {metric_type} metrics")
        missing = [name for name in SUMMARY_FIELDS if name not in config.value]
        if missing:
            raise ComponentError(f"summary value is missing {', '.join(missing)}")

    return metric_type


def _timestamp_millis(value: int | str | None) -> int:
    """Epoch milliseconds; numbers are taken as-is, strings parsed as RFC 3339."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return int(time.time() * 1000)
    if isinstance(value, int):
        return value
    try:
        return text_to_unix_nanos(value.strip()) // 1_000_000
    except ValueError as e:
        raise ComponentError(f"invalid timestamp: {e}") from e


class ReportMetric(Component):
    """Sends a single gauge, count or summary data point to the Metric API."""

    @property
    def name(self) -> str:
        return "newrelic.reportMetric"

    @property
    def label(self) -> str:
        return "Report Metric"

    @property
    def description(self) -> str:
        return "Send a custom metric to New Relic"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(ReportMetricConfig, ctx.configuration)
        _validate(config)
        _timestamp_millis(config.timestamp)

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(ReportMetricConfig, ctx.configuration)
        metric_type = _validate(config)
        timestamp = _timestamp_millis(config.timestamp)

        metric = Metric(
            name=config.metric_name.strip(),
            type=metric_type,
            value=config.value,
            timestamp=timestamp,
            interval_ms=config.interval_ms or None,
            attributes=config.attributes or None,
        )
        common = {"attributes": config.common_attributes} if config.common_attributes else None
        batch = MetricBatch(common=common, metrics=[metric])

        try:
            client = new_client(ctx.integration, ctx.transport)
        except ComponentError as e:
            raise ComponentError(f"failed to create client: {e}") from e

        async with client:
            try:
                await client.report_metric([batch])
            except IntegrationError as e:
                raise ComponentError(f"failed to report metric: {e}") from e

        payload: dict[str, Any] = {
            "metricName": metric.name,
            "metricType": metric_type,
            "value": config.value,
            "timestamp": timestamp,
        }
        if metric.interval_ms:
            payload["intervalMs"] = metric.interval_ms
        if metric.attributes:
            payload["attributes"] = metric.attributes

        logger.info(f"[newrelic] Reported {metric_type} metric {metric.name}")
        ctx.execution_state.emit(DEFAULT_OUTPUT_CHANNEL.name, PAYLOAD_TYPE, [payload])
