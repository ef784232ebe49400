"""Helpers shared by the New Relic components."""

from __future__ import annotations

from typing import Any

import httpx

from superplane_integrations.config import integration_config_from_settings
from superplane_integrations.core.context import IntegrationContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.integrations.newrelic.client import (
    SITE_US,
    NewRelicClient,
    NewRelicConfig,
)


def new_client(
    integration: IntegrationContext,
    transport: httpx.AsyncBaseTransport | None = None,
) -> NewRelicClient:
    """
    Build a client from the integration's apiKey and site.

    Raises:
        ComponentError: If the API key is missing or the site is unknown
    """
    api_key = integration.get_optional_config("apiKey").strip()
    site = integration.get_optional_config("site", SITE_US)
    try:
        config = integration_config_from_settings(NewRelicConfig(api_key=api_key, site=site))
    except ValueError as e:
        raise ComponentError(str(e)) from e
    return NewRelicClient(config, transport=transport)


def is_unresolved_template(value: str) -> bool:
    """True for values that still carry a raw {{ ... }} expression."""
    return "{{" in value and "}}" in value


def extract_resource_id(value: Any) -> str:
    """
    Turn an upstream value into an id string.

    Strings pass through, numbers are formatted without a trailing ".0",
    and maps are searched for id/value/accountId/account keys.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, dict):
        for key in ("id", "ID", "value", "Value", "accountId", "account"):
            if value.get(key) is not None:
                return extract_resource_id(value[key])
    return str(value)


def extract_string_from_data(data: Any, *keys: str) -> str:
    if not isinstance(data, dict):
        return ""
    for key in keys:
        if data.get(key) is not None:
            return extract_resource_id(data[key])
    return ""
