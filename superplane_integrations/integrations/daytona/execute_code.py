"""Execute Code component."""

from __future__ import annotations

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.daytona.common import new_client
from superplane_integrations.integrations.daytona.schemas import (
    SUPPORTED_LANGUAGES,
    ExecuteCodeRequest,
)

PAYLOAD_TYPE = "daytona.code.result"


class ExecuteCodeConfig(ComponentConfig):
    sandbox: str = ""
    code: str = ""
    language: str = "python"
    timeout: int | None = None


class ExecuteCode(Component):
    @property
    def name(self) -> str:
        return "daytona.executeCode"

    @property
    def label(self) -> str:
        return "Execute Code"

    @property
    def description(self) -> str:
        return "Run Python, JavaScript or TypeScript code in a Daytona sandbox"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(ExecuteCodeConfig, ctx.configuration)
        if not config.sandbox.strip():
            raise ComponentError("sandbox is required")
        if not config.code.strip():
            raise ComponentError("code is required")
        if config.language.strip().lower() not in SUPPORTED_LANGUAGES:
            raise ComponentError(
                f"language must be one of {', '.join(SUPPORTED_LANGUAGES)}"
            )

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(ExecuteCodeConfig, ctx.configuration)
        sandbox_id = config.sandbox.strip()
        language = config.language.strip().lower()

        async with new_client(ctx.integration, ctx.transport) as client:
            try:
                result = await client.execute_code(
                    sandbox_id,
                    ExecuteCodeRequest(
                        code=config.code,
                        language=language,
                        timeout=config.timeout or None,
                    ),
                )
            except IntegrationError as e:
                raise ComponentError(f"failed to execute code: {e}") from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            PAYLOAD_TYPE,
            [
                {
                    "sandboxId": sandbox_id,
                    "language": language,
                    "exitCode": result.exit_code,
                    "result": result.result,
                }
            ],
        )
