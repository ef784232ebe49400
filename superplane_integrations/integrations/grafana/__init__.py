"""
Grafana Integration.

Components:
- QueryDataSource (payload "grafana.query.result")

API Reference:
    https://grafana.com/docs/grafana/latest/developers/http_api/
"""

from superplane_integrations.integrations.grafana.client import GrafanaClient, GrafanaConfig
from superplane_integrations.integrations.grafana.integration import GrafanaIntegration
from superplane_integrations.integrations.grafana.query_data_source import QueryDataSource

__all__ = [
    "GrafanaClient",
    "GrafanaConfig",
    "GrafanaIntegration",
    "QueryDataSource",
]
