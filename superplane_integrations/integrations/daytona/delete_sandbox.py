"""Delete Sandbox component."""

from __future__ import annotations

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.daytona.common import new_client

PAYLOAD_TYPE = "daytona.sandbox.deleted"


class DeleteSandboxConfig(ComponentConfig):
    sandbox: str = ""
    force: bool = False


class DeleteSandbox(Component):
    @property
    def name(self) -> str:
        return "daytona.deleteSandbox"

    @property
    def label(self) -> str:
        return "Delete Sandbox"

    @property
    def description(self) -> str:
        return "Delete a Daytona sandbox"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(DeleteSandboxConfig, ctx.configuration)
        if not config.sandbox.strip():
            raise ComponentError("sandbox is required")

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(DeleteSandboxConfig, ctx.configuration)
        sandbox_id = config.sandbox.strip()

        async with new_client(ctx.integration, ctx.transport) as client:
            try:
                await client.delete_sandbox(sandbox_id, force=config.force)
            except IntegrationError as e:
                raise ComponentError(f"failed to delete sandbox: {e}") from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            PAYLOAD_TYPE,
            [{"id": sandbox_id, "deleted": True}],
        )
