"""
Cloudflare Integration.

Components:
- CreateDNSRecord / UpdateDNSRecord / DeleteDNSRecord (payload "cloudflare.dnsRecord",
  channels "default" and "failed")
- UpdateRedirectRule (payload "cloudflare.redirectRule")

Usage:
    from superplane_integrations.integrations.cloudflare import (
        CloudflareClient,
        CloudflareConfig,
    )

    async with CloudflareClient(CloudflareConfig(api_token="...")) as client:
        zones = await client.list_zones()

API Reference:
    https://developers.cloudflare.com/api/
"""

from superplane_integrations.integrations.cloudflare.client import (
    CloudflareAPIError,
    CloudflareClient,
    CloudflareConfig,
)
from superplane_integrations.integrations.cloudflare.create_dns_record import CreateDNSRecord
from superplane_integrations.integrations.cloudflare.delete_dns_record import DeleteDNSRecord
from superplane_integrations.integrations.cloudflare.integration import CloudflareIntegration
from superplane_integrations.integrations.cloudflare.schemas import (
    DNSRecord,
    DNSRecordCreate,
    DNSRecordUpdate,
    RedirectRule,
    Ruleset,
    Zone,
)
from superplane_integrations.integrations.cloudflare.update_dns_record import UpdateDNSRecord
from superplane_integrations.integrations.cloudflare.update_redirect_rule import (
    UpdateRedirectRule,
)

__all__ = [
    "CloudflareAPIError",
    "CloudflareClient",
    "CloudflareConfig",
    "CloudflareIntegration",
    "CreateDNSRecord",
    "DNSRecord",
    "DNSRecordCreate",
    "DNSRecordUpdate",
    "DeleteDNSRecord",
    "RedirectRule",
    "Ruleset",
    "UpdateDNSRecord",
    "UpdateRedirectRule",
    "Zone",
]
