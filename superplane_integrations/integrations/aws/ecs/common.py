"""Helpers shared by the ECS components."""

from __future__ import annotations

import json
from typing import Any

from superplane_integrations.config import integration_config_from_settings
from superplane_integrations.core.context import ExecutionContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.integrations.aws.credentials import credentials_from_integration
from superplane_integrations.integrations.aws.ecs.client import ECSClient, ECSConfig

# Field defaults the node editor pre-fills; sending them would override
# what the task definition already declares.
DEFAULT_NETWORK_CONFIGURATION = {
    "awsvpcConfiguration": {
        "subnets": [],
        "securityGroups": [],
        "assignPublicIp": "DISABLED",
    }
}
DEFAULT_OVERRIDES = {"containerOverrides": []}


def new_client(ctx: ExecutionContext, region: str) -> ECSClient:
    """
    Build a signed ECS client for region.

    Raises:
        ComponentError: If the region or the session credentials are missing
    """
    credentials = credentials_from_integration(ctx.integration)
    try:
        config = integration_config_from_settings(ECSConfig(region=region))
    except ValueError as e:
        raise ComponentError(f"error creating client: {e}") from e
    return ECSClient(config, credentials, transport=ctx.transport)


def optional_object(value: Any, default_template: dict[str, Any]) -> dict[str, Any] | None:
    """
    Normalize an optional object field.

    Accepts a dict or a JSON string. Empty values and the untouched
    editor default both mean "not set".
    """
    if value is None:
        return None

    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except ValueError as e:
            raise ComponentError(f"invalid JSON object: {e}") from e

    if not isinstance(value, dict):
        raise ComponentError(f"expected an object, got {type(value).__name__}")

    if not value or value == default_template:
        return None

    return value
