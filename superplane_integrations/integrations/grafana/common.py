"""Helpers shared by the Grafana components."""

from __future__ import annotations

import httpx

from superplane_integrations.config import integration_config_from_settings
from superplane_integrations.core.context import IntegrationContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.integrations.grafana.client import GrafanaClient, GrafanaConfig


def new_client(
    integration: IntegrationContext,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GrafanaClient:
    """
    Build a client from the integration's baseURL and apiToken.

    Raises:
        ComponentError: If either value is missing
    """
    base_url = integration.get_optional_config("baseURL")
    api_token = integration.get_optional_config("apiToken").strip()
    try:
        config = integration_config_from_settings(
            GrafanaConfig(base_url=base_url, api_token=api_token)
        )
    except ValueError as e:
        raise ComponentError(f"error creating client: {e}") from e
    return GrafanaClient(config, transport=transport)
