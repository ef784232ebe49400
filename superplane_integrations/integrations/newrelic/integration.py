"""New Relic integration."""

from __future__ import annotations

import logging
from typing import Any

from superplane_integrations.core.context import IntegrationContext, SyncContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.plugin import Component, Integration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.newrelic.common import new_client
from superplane_integrations.integrations.newrelic.report_metric import ReportMetric
from superplane_integrations.integrations.newrelic.run_nrql_query import RunNRQLQuery

logger = logging.getLogger(__name__)

RESOURCE_TYPE_ACCOUNT = "account"


class NewRelicIntegration(Integration):
    """
    Connection to New Relic through a user key (NRAK-...) or a license key.

    License keys can only ingest data, so sync() marks them ready without
    calling NerdGraph and leaves the account list empty.
    """

    @property
    def name(self) -> str:
        return "newrelic"

    @property
    def label(self) -> str:
        return "New Relic"

    @property
    def description(self) -> str:
        return "Query telemetry and report metrics to New Relic"

    def components(self) -> list[Component]:
        return [RunNRQLQuery(), ReportMetric()]

    async def sync(self, ctx: SyncContext) -> None:
        client = new_client(ctx.integration, ctx.transport)

        if not client.uses_user_key:
            ctx.integration.set_metadata({"accounts": []})
            ctx.integration.set_state("ready")
            logger.info("[newrelic] License key configured, skipping account discovery")
            return

        async with client:
            try:
                await client.validate_api_key()
            except IntegrationError as e:
                raise ComponentError(f"failed to validate API key: {e}") from e

            try:
                accounts = await client.list_accounts()
            except IntegrationError as e:
                raise ComponentError(f"failed to list accounts: {e}") from e

        ctx.integration.set_metadata({"accounts": [account.model_dump() for account in accounts]})
        ctx.integration.set_state("ready")
        logger.info(f"[newrelic] Synced {len(accounts)} accounts")

    def list_resources(
        self,
        resource_type: str,
        integration: IntegrationContext,
    ) -> list[dict[str, Any]]:
        """Accounts discovered by sync(), shaped for the account dropdown."""
        if resource_type != RESOURCE_TYPE_ACCOUNT:
            return []
        return [
            {"type": RESOURCE_TYPE_ACCOUNT, "id": str(account["id"]), "name": account.get("name", "")}
            for account in integration.metadata.get("accounts") or []
        ]
