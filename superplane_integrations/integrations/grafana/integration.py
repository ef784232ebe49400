"""Grafana integration."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import SyncContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.plugin import Component, Integration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.grafana.common import new_client
from superplane_integrations.integrations.grafana.query_data_source import QueryDataSource

logger = logging.getLogger(__name__)


class GrafanaIntegration(Integration):
    """Connection to a Grafana instance through a service account token."""

    @property
    def name(self) -> str:
        return "grafana"

    @property
    def label(self) -> str:
        return "Grafana"

    @property
    def description(self) -> str:
        return "Query Grafana data sources"

    def components(self) -> list[Component]:
        return [QueryDataSource()]

    async def sync(self, ctx: SyncContext) -> None:
        async with new_client(ctx.integration, ctx.transport) as client:
            try:
                health = await client.health()
            except IntegrationError as e:
                raise ComponentError(f"error checking Grafana health: {e}") from e

        ctx.integration.set_state("ready")
        logger.info(f"[grafana] Connected to Grafana {health.version or 'unknown version'}")
