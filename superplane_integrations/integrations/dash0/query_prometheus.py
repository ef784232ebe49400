"""Query Prometheus component."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.dash0.common import new_client

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "dash0.prometheus.response"
QUERY_TYPE_INSTANT = "instant"
QUERY_TYPE_RANGE = "range"


class QueryPrometheusConfig(ComponentConfig):
    query: str = ""
    dataset: str = ""
    type: str = QUERY_TYPE_INSTANT
    start: str = ""
    end: str = ""
    step: str = ""


class QueryPrometheus(Component):
    """Runs a PromQL query against the Dash0 Prometheus API."""

    @property
    def name(self) -> str:
        return "dash0.queryPrometheus"

    @property
    def label(self) -> str:
        return "Query Prometheus"

    @property
    def description(self) -> str:
        return "Run a PromQL query against Dash0"

    def _validate(self, config: QueryPrometheusConfig, scope: str) -> str:
        if not config.query.strip():
            raise ComponentError(f"{scope}: query is required")

        query_type = config.type.strip().lower() or QUERY_TYPE_INSTANT
        if query_type not in (QUERY_TYPE_INSTANT, QUERY_TYPE_RANGE):
            raise ComponentError(f"{scope}: invalid query type: {config.type}")

        if query_type == QUERY_TYPE_RANGE:
            for field_name in ("start", "end", "step"):
                if not getattr(config, field_name).strip():
                    raise ComponentError(f"{scope}: {field_name} is required for range queries")
        return query_type

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(QueryPrometheusConfig, ctx.configuration)
        self._validate(config, "dash0.queryPrometheus setup")

    async def execute(self, ctx: ExecutionContext) -> None:
        scope = "dash0.queryPrometheus execute"
        config = decode_configuration(QueryPrometheusConfig, ctx.configuration)
        query_type = self._validate(config, scope)

        try:
            client = new_client(ctx.integration, ctx.transport)
        except ComponentError as e:
            raise ComponentError(f"{scope}: create client: {e}") from e

        dataset = config.dataset.strip() or client.dataset
        query = config.query.strip()

        async with client:
            try:
                if query_type == QUERY_TYPE_RANGE:
                    response = await client.query_range(
                        query,
                        dataset,
                        config.start.strip(),
                        config.end.strip(),
                        config.step.strip(),
                    )
                else:
                    response = await client.query_instant(query, dataset)
            except IntegrationError as e:
                raise ComponentError(f"{scope}: {e}") from e

        ctx.execution_state.emit(DEFAULT_OUTPUT_CHANNEL.name, PAYLOAD_TYPE, [response])
