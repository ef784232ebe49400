"""Cloudflare integration."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import SyncContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.plugin import Component, Integration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.cloudflare.common import new_client
from superplane_integrations.integrations.cloudflare.create_dns_record import CreateDNSRecord
from superplane_integrations.integrations.cloudflare.delete_dns_record import DeleteDNSRecord
from superplane_integrations.integrations.cloudflare.update_dns_record import UpdateDNSRecord
from superplane_integrations.integrations.cloudflare.update_redirect_rule import (
    UpdateRedirectRule,
)

logger = logging.getLogger(__name__)


class CloudflareIntegration(Integration):
    """
    Connection to a Cloudflare account through an API token.

    sync() lists the zones the token can see and stores them as metadata,
    which lets components accept a zone name where an id is expected.
    """

    @property
    def name(self) -> str:
        return "cloudflare"

    @property
    def label(self) -> str:
        return "Cloudflare"

    @property
    def description(self) -> str:
        return "Manage DNS records and redirect rules on Cloudflare"

    def components(self) -> list[Component]:
        return [
            CreateDNSRecord(),
            UpdateDNSRecord(),
            DeleteDNSRecord(),
            UpdateRedirectRule(),
        ]

    async def sync(self, ctx: SyncContext) -> None:
        async with new_client(ctx.integration, ctx.transport) as client:
            try:
                zones = await client.list_zones()
            except IntegrationError as e:
                raise ComponentError(f"error listing zones: {e}") from e

        ctx.integration.set_metadata({"zones": [zone.model_dump() for zone in zones]})
        ctx.integration.set_state("ready")
        logger.info(f"[cloudflare] Synced {len(zones)} zones")
