"""Create DNS Record component."""

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
    normalize_record_type,
    resolve_zone_id,
    should_emit_failure,
    validate_record_fields,
    validate_record_type,
)
from superplane_integrations.integrations.cloudflare.schemas import (
    AUTOMATIC_TTL,
    PRIORITY_DNS_RECORD_TYPES,
    PROXYABLE_DNS_RECORD_TYPES,
    DNSRecordCreate,
)

logger = logging.getLogger(__name__)


class CreateDNSRecordConfig(ComponentConfig):
    zone: str = ""
    type: str = ""
    name: str = ""
    content: str = ""
    ttl: int | None = None
    proxied: bool | None = None
    priority: int | None = None


class CreateDNSRecord(Component):
    """
    Creates a DNS record in a zone.

    Records Cloudflare rejects as invalid or conflicting are emitted on the
    "failed" channel so a workflow can branch on them; auth and server
    errors fail the run.
    """

    @property
    def name(self) -> str:
        return "cloudflare.createDnsRecord"

    @property
    def label(self) -> str:
        return "Create DNS Record"

    @property
    def description(self) -> str:
        return "Create a DNS record in a Cloudflare zone"

    def output_channels(self, configuration=None) -> list[OutputChannel]:
        return [DEFAULT_OUTPUT_CHANNEL, FAILED_OUTPUT_CHANNEL]

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(CreateDNSRecordConfig, ctx.configuration)
        record_type = normalize_record_type(config.type)

        if not config.zone:
            raise ComponentError("zone is required")
        if not record_type:
            raise ComponentError("type is required")
        validate_record_type(record_type)
        if not config.name:
            raise ComponentError("name is required")
        if not config.content:
            raise ComponentError("content is required")

        validate_record_fields(
            record_type,
            ttl=config.ttl,
            proxied=config.proxied,
            priority=config.priority,
        )

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(CreateDNSRecordConfig, ctx.configuration)
        client = new_client(ctx.integration, ctx.transport)

        zone_id = resolve_zone_id(config.zone, ctx.integration)
        record_type = normalize_record_type(config.type)

        request = DNSRecordCreate(
            type=record_type,
            name=config.name,
            content=config.content,
            ttl=config.ttl if config.ttl is not None else AUTOMATIC_TTL,
        )
        if record_type in PROXYABLE_DNS_RECORD_TYPES:
            request.proxied = bool(config.proxied)
        if record_type in PRIORITY_DNS_RECORD_TYPES:
            request.priority = config.priority

        async with client:
            try:
                record = await client.create_dns_record(zone_id, request)
            except CloudflareAPIError as e:
                if should_emit_failure(e):
                    logger.warning(f"[cloudflare] DNS record rejected (status={e.status_code})")
                    ctx.execution_state.emit(
                        FAILED_OUTPUT_CHANNEL.name,
                        DNS_RECORD_PAYLOAD_TYPE,
                        [failure_payload(e)],
                    )
                    return
                raise ComponentError(f"failed to create DNS record: {e}") from e
            except IntegrationError as e:
                raise ComponentError(f"failed to create DNS record: {e}") from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            DNS_RECORD_PAYLOAD_TYPE,
            [record.to_payload()],
        )
