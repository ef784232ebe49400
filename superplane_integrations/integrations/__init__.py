"""
Third-party integrations.

Each subpackage (aws, cloudflare, dash0, daytona, grafana, newrelic,
smtp) exposes an Integration plus the components and triggers it owns.
Subpackages are imported on demand; this module only re-exports the
shared client base.
"""

from superplane_integrations.integrations.base import (
    AuthenticationError,
    IntegrationClient,
    IntegrationConfig,
    IntegrationError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "IntegrationClient",
    "IntegrationConfig",
    "IntegrationError",
    "NotFoundError",
    "RateLimitError",
    "ValidationError",
]
