"""Execute Command component."""

from __future__ import annotations

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.daytona.common import new_client
from superplane_integrations.integrations.daytona.schemas import ExecuteCommandRequest

PAYLOAD_TYPE = "daytona.command.result"


class ExecuteCommandConfig(ComponentConfig):
    sandbox: str = ""
    command: str = ""
    cwd: str = ""
    timeout: int | None = None


class ExecuteCommand(Component):
    """Runs a shell command inside an existing sandbox."""

    @property
    def name(self) -> str:
        return "daytona.executeCommand"

    @property
    def label(self) -> str:
        return "Execute Command"

    @property
    def description(self) -> str:
        return "Run a shell command in a Daytona sandbox"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(ExecuteCommandConfig, ctx.configuration)
        if not config.sandbox.strip():
            raise ComponentError("sandbox is required")
        if not config.command.strip():
            raise ComponentError("command is required")
        if config.timeout is not None and config.timeout < 0:
            raise ComponentError("timeout cannot be negative")

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(ExecuteCommandConfig, ctx.configuration)
        sandbox_id = config.sandbox.strip()
        request = ExecuteCommandRequest(
            command=config.command,
            cwd=config.cwd.strip() or None,
            timeout=config.timeout or None,
        )

        async with new_client(ctx.integration, ctx.transport) as client:
            try:
                result = await client.execute_command(sandbox_id, request)
            except IntegrationError as e:
                raise ComponentError(f"failed to execute command: {e}") from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            PAYLOAD_TYPE,
            [
                {
                    "sandboxId": sandbox_id,
                    "command": config.command,
                    "exitCode": result.exit_code,
                    "result": result.result,
                }
            ],
        )
