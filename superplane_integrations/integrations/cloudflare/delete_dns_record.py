"""Delete DNS Record component."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import (
    DEFAULT_OUTPUT_CHANNEL,
    FAILED_OUTPUT_CHANNEL,
    OutputChannel,
)
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.cloudflare.client import CloudflareAPIError
from superplane_integrations.integrations.cloudflare.common import (
    DNS_RECORD_PAYLOAD_TYPE,
    failure_payload,
    new_client,
    resolve_zone_id,
    should_emit_failure,
)
from superplane_integrations.integrations.cloudflare.update_dns_record import find_dns_record

logger = logging.getLogger(__name__)


class DeleteDNSRecordConfig(ComponentConfig):
    zone: str = ""
    record: str = ""


class DeleteDNSRecord(Component):
    @property
    def name(self) -> str:
        return "cloudflare.deleteDnsRecord"

    @property
    def label(self) -> str:
        return "Delete DNS Record"

    @property
    def description(self) -> str:
        return "Delete a DNS record from a Cloudflare zone"

    def output_channels(self, configuration=None) -> list[OutputChannel]:
        return [DEFAULT_OUTPUT_CHANNEL, FAILED_OUTPUT_CHANNEL]

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(DeleteDNSRecordConfig, ctx.configuration)
        if not config.zone:
            raise ComponentError("zone is required")
        if not config.record.strip():
            raise ComponentError("record is required")

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(DeleteDNSRecordConfig, ctx.configuration)
        client = new_client(ctx.integration, ctx.transport)
        zone_id = resolve_zone_id(config.zone, ctx.integration)

        async with client:
            try:
                record = await find_dns_record(client, zone_id, config.record.strip())
                result = await client.delete_dns_record(zone_id, record.id)
            except CloudflareAPIError as e:
                if should_emit_failure(e):
                    logger.warning(f"[cloudflare] DNS record delete rejected (status={e.status_code})")
                    ctx.execution_state.emit(
                        FAILED_OUTPUT_CHANNEL.name,
                        DNS_RECORD_PAYLOAD_TYPE,
                        [failure_payload(e)],
                    )
                    return
                raise ComponentError(f"failed to delete DNS record: {e}") from e
            except IntegrationError as e:
                raise ComponentError(f"failed to delete DNS record: {e}") from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            DNS_RECORD_PAYLOAD_TYPE,
            [
                {
                    "id": result.get("id") or record.id,
                    "name": record.name,
                    "zoneId": zone_id,
                    "deleted": True,
                }
            ],
        )
