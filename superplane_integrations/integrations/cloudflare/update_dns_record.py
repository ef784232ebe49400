"""Update DNS Record component."""

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
from superplane_integrations.integrations.cloudflare.client import (
    CloudflareAPIError,
    CloudflareClient,
)
from superplane_integrations.integrations.cloudflare.common import (
    DNS_RECORD_PAYLOAD_TYPE,
    failure_payload,
    new_client,
    normalize_record_type,
    resolve_zone_id,
    should_emit_failure,
    validate_record_fields,
    validate_record_type,
)
from superplane_integrations.integrations.cloudflare.schemas import (
    PRIORITY_DNS_RECORD_TYPES,
    PROXYABLE_DNS_RECORD_TYPES,
    DNSRecord,
    DNSRecordUpdate,
)

logger = logging.getLogger(__name__)


class UpdateDNSRecordConfig(ComponentConfig):
    zone: str = ""
    record: str = ""
    type: str = ""
    name: str = ""
    content: str = ""
    ttl: int | None = None
    proxied: bool | None = None
    priority: int | None = None


async def find_dns_record(client: CloudflareClient, zone_id: str, value: str) -> DNSRecord:
    """Look a record up by id or by name within the zone."""
    for record in await client.list_dns_records(zone_id):
        if value in (record.id, record.name):
            return record
    return await client.get_dns_record(zone_id, value)


class UpdateDNSRecord(Component):
    """
    Replaces an existing DNS record.

    Fields left empty keep the record's current value, so a node can change
    only the content of an A record without restating its name and TTL.
    """

    @property
    def name(self) -> str:
        return "cloudflare.updateDnsRecord"

    @property
    def label(self) -> str:
        return "Update DNS Record"

    @property
    def description(self) -> str:
        return "Update an existing DNS record in a Cloudflare zone"

    def output_channels(self, configuration=None) -> list[OutputChannel]:
        return [DEFAULT_OUTPUT_CHANNEL, FAILED_OUTPUT_CHANNEL]

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(UpdateDNSRecordConfig, ctx.configuration)

        if not config.zone:
            raise ComponentError("zone is required")
        if not config.record.strip():
            raise ComponentError("record is required")

        record_type = normalize_record_type(config.type)
        if record_type:
            validate_record_type(record_type)
            validate_record_fields(
                record_type,
                ttl=config.ttl,
                proxied=config.proxied,
                priority=config.priority,
            )

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(UpdateDNSRecordConfig, ctx.configuration)
        client = new_client(ctx.integration, ctx.transport)
        zone_id = resolve_zone_id(config.zone, ctx.integration)

        async with client:
            try:
                current = await find_dns_record(client, zone_id, config.record.strip())
                request = self._merge(config, current)
                validate_record_fields(
                    request.type,
                    ttl=request.ttl,
                    proxied=request.proxied,
                    priority=request.priority,
                )
                record = await client.update_dns_record(zone_id, current.id, request)
            except CloudflareAPIError as e:
                if should_emit_failure(e):
                    logger.warning(f"[cloudflare] DNS record update rejected (status={e.status_code})")
                    ctx.execution_state.emit(
                        FAILED_OUTPUT_CHANNEL.name,
                        DNS_RECORD_PAYLOAD_TYPE,
                        [failure_payload(e)],
                    )
                    return
                raise ComponentError(f"failed to update DNS record: {e}") from e
            except IntegrationError as e:
                raise ComponentError(f"failed to update DNS record: {e}") from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            DNS_RECORD_PAYLOAD_TYPE,
            [record.to_payload()],
        )

    def _merge(self, config: UpdateDNSRecordConfig, current: DNSRecord) -> DNSRecordUpdate:
        record_type = normalize_record_type(config.type) or current.type
        request = DNSRecordUpdate(
            type=record_type,
            name=config.name or current.name,
            content=config.content or current.content,
            ttl=config.ttl if config.ttl is not None else current.ttl,
            proxied=False,
        )
        if record_type in PROXYABLE_DNS_RECORD_TYPES:
            request.proxied = config.proxied if config.proxied is not None else current.proxied
        if record_type in PRIORITY_DNS_RECORD_TYPES:
            request.priority = config.priority if config.priority is not None else current.priority
        return request
