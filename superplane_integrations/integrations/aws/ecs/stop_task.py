"""ECS • Stop Task component."""

from __future__ import annotations

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.aws.ecs.common import new_client
from superplane_integrations.integrations.aws.ecs.schemas import StopTaskRequest
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.utils import embed_json

PAYLOAD_TYPE = "aws.ecs.task.stopped"


class StopTaskConfig(ComponentConfig):
    region: str = ""
    cluster: str = ""
    task: str = ""
    reason: str = ""


def _decode(configuration) -> StopTaskConfig:
    config = decode_configuration(StopTaskConfig, configuration)
    return config.model_copy(
        update={
            "region": config.region.strip(),
            "cluster": config.cluster.strip(),
            "task": config.task.strip(),
            "reason": config.reason.strip(),
        }
    )


class StopTask(Component):
    @property
    def name(self) -> str:
        return "aws.ecs.stopTask"

    @property
    def label(self) -> str:
        return "ECS • Stop Task"

    @property
    def description(self) -> str:
        return "Stop a running task in AWS ECS"

    async def setup(self, ctx: SetupContext) -> None:
        config = _decode(ctx.configuration)

        if not config.region:
            raise ComponentError("region is required")
        if not config.cluster:
            raise ComponentError("cluster is required")
        if not config.task:
            raise ComponentError("task is required")

    async def execute(self, ctx: ExecutionContext) -> None:
        config = _decode(ctx.configuration)
        request = StopTaskRequest(
            cluster=config.cluster,
            task=config.task,
            reason=config.reason or None,
        )

        async with new_client(ctx, config.region) as client:
            try:
                response = await client.stop_task(request)
            except IntegrationError as e:
                raise ComponentError(f"failed to stop ECS task: {e.message}") from e

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            PAYLOAD_TYPE,
            [embed_json({"task": response.task})],
        )
