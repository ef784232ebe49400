"""Create Sandbox component."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.daytona.common import new_client
from superplane_integrations.integrations.daytona.schemas import CreateSandboxRequest
from superplane_integrations.utils import embed_json

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "daytona.sandbox"


class EnvVar(ComponentConfig):
    name: str = ""
    value: str = ""


class CreateSandboxConfig(ComponentConfig):
    snapshot: str = ""
    target: str = ""
    auto_stop_interval: int | None = None
    env: list[EnvVar] | None = None


class CreateSandbox(Component):
    @property
    def name(self) -> str:
        return "daytona.createSandbox"

    @property
    def label(self) -> str:
        return "Create Sandbox"

    @property
    def description(self) -> str:
        return "Create an isolated Daytona sandbox"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(CreateSandboxConfig, ctx.configuration)
        if config.auto_stop_interval is not None and config.auto_stop_interval < 0:
            raise ComponentError("autoStopInterval cannot be negative")
        for var in config.env or []:
            if not var.name.strip():
                raise ComponentError("environment variable name is required")

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(CreateSandboxConfig, ctx.configuration)
        env = {var.name.strip(): var.value for var in config.env or [] if var.name.strip()}
        request = CreateSandboxRequest(
            snapshot=config.snapshot.strip() or None,
            target=config.target.strip() or None,
            auto_stop_interval=config.auto_stop_interval,
            env=env or None,
        )

        async with new_client(ctx.integration, ctx.transport) as client:
            try:
                sandbox = await client.create_sandbox(request)
            except IntegrationError as e:
                raise ComponentError(f"failed to create sandbox: {e}") from e

        logger.info(f"[daytona] Sandbox {sandbox.id} created ({sandbox.state})")
        ctx.execution_state.emit(DEFAULT_OUTPUT_CHANNEL.name, PAYLOAD_TYPE, [embed_json(sandbox)])
