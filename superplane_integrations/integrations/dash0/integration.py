"""Dash0 integration."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import SyncContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.plugin import Component, Integration, Trigger
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.dash0.check_rules import CreateCheckRule, UpdateCheckRule
from superplane_integrations.integrations.dash0.common import new_client
from superplane_integrations.integrations.dash0.on_alert_event import OnAlertEvent
from superplane_integrations.integrations.dash0.query_prometheus import QueryPrometheus
from superplane_integrations.integrations.dash0.send_log_event import SendLogEvent
from superplane_integrations.integrations.dash0.synthetic_checks import (
    CreateSyntheticCheck,
    UpdateSyntheticCheck,
)

logger = logging.getLogger(__name__)


class Dash0Integration(Integration):
    """
    Connection to a Dash0 organization.

    Configuration: apiToken, baseURL (the API endpoint shown under
    Organization Settings > Endpoints Reference) and an optional dataset.
    """

    @property
    def name(self) -> str:
        return "dash0"

    @property
    def label(self) -> str:
        return "Dash0"

    @property
    def description(self) -> str:
        return "Query metrics, send logs and manage checks in Dash0"

    def components(self) -> list[Component]:
        return [
            QueryPrometheus(),
            SendLogEvent(),
            CreateSyntheticCheck(),
            UpdateSyntheticCheck(),
            CreateCheckRule(),
            UpdateCheckRule(),
        ]

    def triggers(self) -> list[Trigger]:
        return [OnAlertEvent()]

    async def sync(self, ctx: SyncContext) -> None:
        async with new_client(ctx.integration, ctx.transport) as client:
            try:
                rules = await client.list_check_rules()
            except IntegrationError as e:
                raise ComponentError(f"error validating connection: {e}") from e

        ctx.integration.set_state("ready")
        logger.info(f"[dash0] Connection verified, {len(rules)} check rules visible")
