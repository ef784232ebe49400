"""
Core plugin abstractions.

Components, triggers and integrations are plain classes; the host drives
them through the context objects defined here and reads back what they
emitted from ExecutionState / EventSink.
"""

from superplane_integrations.core.context import (
    ExecutionContext,
    IntegrationContext,
    SetupContext,
    SyncContext,
    TriggerContext,
    WebhookRequestContext,
)
from superplane_integrations.core.errors import ComponentError, RegistryError
from superplane_integrations.core.execution import (
    DEFAULT_OUTPUT_CHANNEL,
    FAILED_OUTPUT_CHANNEL,
    Emission,
    EventSink,
    ExecutionState,
    OutputChannel,
    WebhookResult,
)
from superplane_integrations.core.plugin import (
    Component,
    ComponentConfig,
    Integration,
    Trigger,
    decode_configuration,
)
from superplane_integrations.core.registry import PluginRegistry, create_default_registry

__all__ = [
    "Component",
    "ComponentConfig",
    "ComponentError",
    "DEFAULT_OUTPUT_CHANNEL",
    "Emission",
    "EventSink",
    "ExecutionContext",
    "ExecutionState",
    "FAILED_OUTPUT_CHANNEL",
    "Integration",
    "IntegrationContext",
    "OutputChannel",
    "PluginRegistry",
    "RegistryError",
    "SetupContext",
    "SyncContext",
    "Trigger",
    "TriggerContext",
    "WebhookRequestContext",
    "WebhookResult",
    "create_default_registry",
    "decode_configuration",
]
