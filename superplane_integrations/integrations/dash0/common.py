"""Helpers shared by the Dash0 components and trigger."""

from __future__ import annotations

import httpx

from superplane_integrations.config import integration_config_from_settings
from superplane_integrations.core.context import IntegrationContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.integrations.dash0.client import (
    BASE_URL_REQUIRED_MESSAGE,
    DEFAULT_DATASET,
    Dash0Client,
    Dash0Config,
    normalize_base_url,
)


def new_client(
    integration: IntegrationContext,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Dash0Client:
    """
    Build a client from the integration's apiToken, baseURL and dataset.

    Raises:
        ComponentError: If the token or base URL is not configured
    """
    try:
        api_token = integration.get_config("apiToken")
    except ComponentError as e:
        raise ComponentError(f"dash0 client: get api token: {e}") from e

    base_url = normalize_base_url(integration.get_optional_config("baseURL"))
    if not base_url:
        raise ComponentError(f"dash0 client: {BASE_URL_REQUIRED_MESSAGE}")

    dataset = integration.get_optional_config("dataset").strip() or DEFAULT_DATASET
    try:
        config = integration_config_from_settings(
            Dash0Config(api_token=api_token, base_url=base_url, dataset=dataset)
        )
    except ValueError as e:
        raise ComponentError(f"dash0 client: {e}") from e
    return Dash0Client(config, transport=transport)
