"""
Plugin Registry.

The registry is the lookup table the host uses to find an integration,
component or trigger by its stable name:
- Registration with validation (unique names, non-empty labels)
- Lookup by name
- Listing for catalog views

Usage:
    registry = create_default_registry()

    component = registry.get_required_component("cloudflare.createDnsRecord")
    await component.setup(ctx)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from superplane_integrations.core.errors import RegistryError

if TYPE_CHECKING:
    from superplane_integrations.core.plugin import Component, Integration, Trigger

logger = logging.getLogger(__name__)


class PluginRegistry:
    """
    Registry of integrations and the components/triggers they expose.

    Registering an integration registers all of its components and
    triggers. Names are unique per kind.
    """

    def __init__(self) -> None:
        self._integrations: dict[str, Integration] = {}
        self._components: dict[str, Component] = {}
        self._triggers: dict[str, Trigger] = {}

    def register(self, integration: Integration) -> None:
        """
        Register an integration with its components and triggers.

        Raises:
            RegistryError: If any name is already registered or invalid
        """
        if integration.name in self._integrations:
            raise RegistryError(f"Integration '{integration.name}' already registered.")
        self._validate("Integration", integration)

        components = integration.components()
        triggers = integration.triggers()
        for component in components:
            self._validate("Component", component)
            if component.name in self._components:
                raise RegistryError(f"Component '{component.name}' already registered.")
        for trigger in triggers:
            self._validate("Trigger", trigger)
            if trigger.name in self._triggers:
                raise RegistryError(f"Trigger '{trigger.name}' already registered.")

        self._integrations[integration.name] = integration
        for component in components:
            self._components[component.name] = component
        for trigger in triggers:
            self._triggers[trigger.name] = trigger

        logger.info(
            f"[plugin_registry] Registered integration {integration.name} "
            f"({len(components)} components, {len(triggers)} triggers)"
        )

    def get_integration(self, name: str) -> Integration | None:
        return self._integrations.get(name)

    def get_component(self, name: str) -> Component | None:
        return self._components.get(name)

    def get_trigger(self, name: str) -> Trigger | None:
        return self._triggers.get(name)

    def get_required_component(self, name: str) -> Component:
        """
        Get a component by name, raising if not found.

        Raises:
            RegistryError: If component not found
        """
        component = self._components.get(name)
        if component is None:
            raise RegistryError(
                f"Component '{name}' not found. Available components: {self.list_component_names()}"
            )
        return component

    def get_required_trigger(self, name: str) -> Trigger:
        trigger = self._triggers.get(name)
        if trigger is None:
            raise RegistryError(
                f"Trigger '{name}' not found. Available triggers: {sorted(self._triggers)}"
            )
        return trigger

    def list_integrations(self) -> list[Integration]:
        return list(self._integrations.values())

    def list_components(self) -> list[Component]:
        return list(self._components.values())

    def list_triggers(self) -> list[Trigger]:
        return list(self._triggers.values())

    def list_component_names(self) -> list[str]:
        return sorted(self._components)

    def _validate(self, kind: str, plugin: Integration | Component | Trigger) -> None:
        if not plugin.name or not isinstance(plugin.name, str):
            raise RegistryError(f"{kind} must have a valid name: {plugin!r}")
        if not plugin.label:
            raise RegistryError(f"{kind} '{plugin.name}' must have a label")

    def __len__(self) -> int:
        return len(self._components) + len(self._triggers)

    def __contains__(self, name: str) -> bool:
        return name in self._components or name in self._triggers or name in self._integrations

    def __repr__(self) -> str:
        return (
            f"<PluginRegistry integrations={sorted(self._integrations)} "
            f"components={len(self._components)} triggers={len(self._triggers)}>"
        )


def create_default_registry() -> PluginRegistry:
    """Create a registry with every integration shipped in this package."""
    from superplane_integrations.integrations.aws import AWSIntegration
    from superplane_integrations.integrations.cloudflare import CloudflareIntegration
    from superplane_integrations.integrations.dash0 import Dash0Integration
    from superplane_integrations.integrations.daytona import DaytonaIntegration
    from superplane_integrations.integrations.grafana import GrafanaIntegration
    from superplane_integrations.integrations.newrelic import NewRelicIntegration
    from superplane_integrations.integrations.smtp import SMTPIntegration

    registry = PluginRegistry()
    for integration in (
        AWSIntegration(),
        CloudflareIntegration(),
        Dash0Integration(),
        DaytonaIntegration(),
        GrafanaIntegration(),
        NewRelicIntegration(),
        SMTPIntegration(),
    ):
        registry.register(integration)

    return registry
