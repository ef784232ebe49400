"""
Context objects handed to plugins by the host.

The host owns persistence, secrets storage and webhook provisioning. A
plugin only ever sees these small in-memory views, which keeps every
component testable by constructing the contexts directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import EventSink, ExecutionState

logger = logging.getLogger(__name__)


@dataclass
class IntegrationContext:
    """
    Connection to one third-party account.

    configuration holds the user-entered integration settings (API tokens,
    base URLs, sites), secrets holds host-managed credentials (AWS session
    credentials) and metadata holds whatever sync() discovered (Cloudflare
    zones, New Relic accounts).
    """

    configuration: dict[str, Any] = field(default_factory=dict)
    secrets: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    state: str = "pending"
    state_description: str = ""
    webhook_requests: list[dict[str, Any]] = field(default_factory=list)

    def get_config(self, name: str) -> str:
        """Return a configuration value as a string, raising when absent."""
        if name not in self.configuration or self.configuration[name] is None:
            raise ComponentError(f"config {name} not found")
        value = self.configuration[name]
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def get_optional_config(self, name: str, default: str = "") -> str:
        try:
            return self.get_config(name)
        except ComponentError:
            return default

    def get_secret(self, name: str) -> str:
        return self.secrets.get(name, "")

    def set_metadata(self, metadata: dict[str, Any]) -> None:
        self.metadata = metadata

    def set_state(self, state: str, description: str = "") -> None:
        self.state = state
        self.state_description = description
        logger.info(f"[integration] State changed to {state}")

    def request_webhook(self, configuration: dict[str, Any]) -> None:
        self.webhook_requests.append(configuration)


@dataclass
class SetupContext:
    """Passed to Component.setup() when a workflow node is saved."""

    configuration: dict[str, Any] = field(default_factory=dict)
    integration: IntegrationContext = field(default_factory=IntegrationContext)
    metadata: dict[str, Any] = field(default_factory=dict)
    transport: httpx.AsyncBaseTransport | None = None


@dataclass
class ExecutionContext:
    """
    Passed to Component.execute().

    data carries the upstream payload for components that fall back to it
    when their own configuration leaves a value empty.
    """

    configuration: dict[str, Any] = field(default_factory=dict)
    integration: IntegrationContext = field(default_factory=IntegrationContext)
    execution_state: ExecutionState = field(default_factory=ExecutionState)
    data: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)
    transport: httpx.AsyncBaseTransport | None = None


@dataclass
class TriggerContext:
    """Passed to Trigger.setup()."""

    configuration: dict[str, Any] = field(default_factory=dict)
    integration: IntegrationContext = field(default_factory=IntegrationContext)


@dataclass
class WebhookRequestContext:
    """An inbound webhook delivery for a trigger."""

    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    configuration: dict[str, Any] = field(default_factory=dict)
    events: EventSink = field(default_factory=EventSink)


@dataclass
class SyncContext:
    """Passed to Integration.sync() when credentials are saved or refreshed."""

    configuration: dict[str, Any] = field(default_factory=dict)
    integration: IntegrationContext = field(default_factory=IntegrationContext)
    transport: httpx.AsyncBaseTransport | None = None
