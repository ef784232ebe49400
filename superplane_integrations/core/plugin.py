"""
Plugin Base Classes.

This module defines the three plugin kinds the host knows about:
- Component: a workflow node that validates its configuration on save
  (setup) and performs one action when it runs (execute)
- Trigger: a webhook-driven entry point that turns inbound callbacks
  into workflow events
- Integration: a connection to a third-party account that exposes
  components and triggers and can verify its own credentials (sync)

Usage:
    class PingComponent(Component):
        @property
        def name(self) -> str:
            return "example.ping"

        @property
        def label(self) -> str:
            return "Ping"

        @property
        def description(self) -> str:
            return "Emit a static payload"

        async def setup(self, ctx: SetupContext) -> None:
            decode_configuration(PingConfig, ctx.configuration)

        async def execute(self, ctx: ExecutionContext) -> None:
            ctx.execution_state.emit("default", "example.pong", [{"ok": True}])
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL, OutputChannel

if TYPE_CHECKING:
    from superplane_integrations.core.context import (
        ExecutionContext,
        SetupContext,
        SyncContext,
        TriggerContext,
        WebhookRequestContext,
    )
    from superplane_integrations.core.execution import WebhookResult


class ComponentConfig(BaseModel):
    """
    Base model for a node's configuration map.

    The host stores configuration with camelCase keys; fields are declared
    in snake_case and matched through the camel alias.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


C = TypeVar("C", bound=BaseModel)


def decode_configuration(model: type[C], configuration: dict[str, Any] | None) -> C:
    """
    Decode a configuration map into a pydantic model.

    Raises:
        ComponentError: If the map does not fit the model
    """
    try:
        return model.model_validate(configuration or {})
    except pydantic.ValidationError as e:
        raise ComponentError(f"failed to decode configuration: {e}") from e


class Component(ABC):
    """
    Base class for all workflow components.

    Contract:
        - name: stable identifier, "<integration>.<action>"
        - label/description: human-readable strings
        - output_channels: channels execute() may emit on
        - setup: validate configuration, raise ComponentError when invalid
        - execute: perform the action and emit exactly once
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def label(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    def output_channels(self, configuration: dict[str, Any] | None = None) -> list[OutputChannel]:
        return [DEFAULT_OUTPUT_CHANNEL]

    @abstractmethod
    async def setup(self, ctx: SetupContext) -> None:
        """Validate the node configuration."""
        ...

    @abstractmethod
    async def execute(self, ctx: ExecutionContext) -> None:
        """Run the action and emit the result on an output channel."""
        ...

    async def cancel(self, ctx: ExecutionContext) -> None:
        """Executions are single request/response calls; nothing to cancel."""
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"


class Trigger(ABC):
    """Base class for webhook-driven workflow entry points."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def label(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @abstractmethod
    async def setup(self, ctx: TriggerContext) -> None:
        """Validate configuration and request a webhook endpoint."""
        ...

    @abstractmethod
    async def handle_webhook(self, ctx: WebhookRequestContext) -> WebhookResult:
        """Validate an inbound delivery and emit zero or one event."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"


class Integration(ABC):
    """
    A connection to a third-party SaaS account.

    An integration groups the components and triggers that share its
    credentials. sync() is called when the user saves or refreshes the
    connection and marks it ready once the credentials check out.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def label(self) -> str: ...

    @property
    def description(self) -> str:
        return ""

    @abstractmethod
    def components(self) -> list[Component]: ...

    def triggers(self) -> list[Trigger]:
        return []

    @abstractmethod
    async def sync(self, ctx: SyncContext) -> None: ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"
