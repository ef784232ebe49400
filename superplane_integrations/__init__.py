"""
SuperPlane Integrations - third-party plugins for the SuperPlane workflow engine.

Each integration wraps one SaaS API behind the same plugin shape:

- **Integration**: credentials plus a sync() that verifies them
- **Component**: setup() validates a node's configuration, execute()
  makes one API call and emits the result on an output channel
- **Trigger**: turns inbound webhooks into workflow events

Available integrations: AWS ECS, Cloudflare, Dash0, Daytona, Grafana,
New Relic and SMTP.

Quick Start:
    >>> from superplane_integrations import ExecutionContext, IntegrationContext
    >>> from superplane_integrations import create_default_registry
    >>>
    >>> registry = create_default_registry()
    >>> component = registry.get_required_component("grafana.queryDataSource")
    >>> ctx = ExecutionContext(
    ...     configuration={"dataSourceUid": "prom", "query": "up"},
    ...     integration=IntegrationContext(
    ...         configuration={"baseURL": "https://grafana.example.com", "apiToken": "..."}
    ...     ),
    ... )
    >>> await component.execute(ctx)
    >>> ctx.execution_state.payloads
"""

__version__ = "0.1.0"
__author__ = "SuperPlane"
__license__ = "Apache-2.0"

from superplane_integrations.core import (
    Component,
    ComponentError,
    ExecutionContext,
    ExecutionState,
    Integration,
    IntegrationContext,
    PluginRegistry,
    SetupContext,
    SyncContext,
    Trigger,
    TriggerContext,
    WebhookRequestContext,
    WebhookResult,
    create_default_registry,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Plugins
    "Component",
    "ComponentError",
    "Integration",
    "PluginRegistry",
    "Trigger",
    "create_default_registry",
    # Contexts
    "ExecutionContext",
    "ExecutionState",
    "IntegrationContext",
    "SetupContext",
    "SyncContext",
    "TriggerContext",
    "WebhookRequestContext",
    "WebhookResult",
]
