"""Helpers shared by the Daytona components."""

from __future__ import annotations

import httpx

from superplane_integrations.config import integration_config_from_settings
from superplane_integrations.core.context import IntegrationContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.integrations.daytona.client import (
    DEFAULT_BASE_URL,
    DaytonaClient,
    DaytonaConfig,
)


def new_client(
    integration: IntegrationContext | None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> DaytonaClient:
    """
    Build a client from the integration's apiKey and optional baseURL.

    Raises:
        ComponentError: If there is no integration or no API key
    """
    if integration is None:
        raise ComponentError("no app installation context")

    api_key = integration.get_optional_config("apiKey").strip()
    base_url = integration.get_optional_config("baseURL").strip() or DEFAULT_BASE_URL
    try:
        config = integration_config_from_settings(
            DaytonaConfig(api_key=api_key, base_url=base_url)
        )
    except ValueError as e:
        raise ComponentError(str(e)) from e
    return DaytonaClient(config, transport=transport)
