"""Query Data Source component."""

from __future__ import annotations

import logging

from pydantic import Field

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.grafana.common import new_client
from superplane_integrations.integrations.grafana.schemas import DataSourceQueryRequest
from superplane_integrations.utils import embed_json

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "grafana.query.result"
DEFAULT_FROM = "now-1h"
DEFAULT_TO = "now"


class QueryDataSourceConfig(ComponentConfig):
    data_source_uid: str = ""
    query: str = ""
    from_: str = Field(default="", alias="from")
    to: str = ""


def _validate(config: QueryDataSourceConfig) -> None:
    if not config.data_source_uid.strip():
        raise ComponentError("dataSourceUid is required")
    if not config.query.strip():
        raise ComponentError("query is required")


class QueryDataSource(Component):
    """Runs a query against one Grafana data source through /api/ds/query."""

    @property
    def name(self) -> str:
        return "grafana.queryDataSource"

    @property
    def label(self) -> str:
        return "Query Data Source"

    @property
    def description(self) -> str:
        return "Run a query against a Grafana data source"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(QueryDataSourceConfig, ctx.configuration)
        _validate(config)

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(QueryDataSourceConfig, ctx.configuration)
        _validate(config)

        data_source_uid = config.data_source_uid.strip()
        query = config.query.strip()
        start = config.from_.strip() or DEFAULT_FROM
        end = config.to.strip() or DEFAULT_TO

        request = DataSourceQueryRequest.single(data_source_uid, query, start, end)

        async with new_client(ctx.integration, ctx.transport) as client:
            try:
                response = await client.query_data_source(request)
            except IntegrationError as e:
                raise ComponentError(f"query failed: {e}") from e

        errors = response.errors()
        if errors:
            raise ComponentError(f"query failed: {'; '.join(errors)}")

        logger.info(
            f"[grafana] Query on data source {data_source_uid} "
            f"returned {len(response.results)} result(s)"
        )
        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            PAYLOAD_TYPE,
            [
                {
                    "dataSourceUid": data_source_uid,
                    "query": query,
                    "from": start,
                    "to": end,
                    "results": embed_json(response.results),
                }
            ],
        )
