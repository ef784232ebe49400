"""ECS • Run Task component."""

from __future__ import annotations

import logging
from typing import Any

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.aws.ecs.common import (
    DEFAULT_NETWORK_CONFIGURATION,
    DEFAULT_OVERRIDES,
    new_client,
    optional_object,
)
from superplane_integrations.integrations.aws.ecs.schemas import RunTaskRequest
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.utils import embed_json

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "aws.ecs.task"
ALLOWED_LAUNCH_TYPES = ("FARGATE", "EC2", "EXTERNAL")


class RunTaskConfig(ComponentConfig):
    region: str = ""
    cluster: str = ""
    task_definition: str = ""
    count: int = 1
    launch_type: str = ""
    group: str = ""
    started_by: str = ""
    platform_version: str = ""
    enable_execute_command: bool = False
    network_configuration: Any = None
    overrides: Any = None

    def normalized(self) -> RunTaskConfig:
        launch_type = self.launch_type.strip().upper()
        if launch_type == "AUTO":
            launch_type = ""
        return self.model_copy(
            update={
                "region": self.region.strip(),
                "cluster": self.cluster.strip(),
                "task_definition": self.task_definition.strip(),
                "launch_type": launch_type,
                "group": self.group.strip(),
                "started_by": self.started_by.strip(),
                "platform_version": self.platform_version.strip(),
            }
        )


def _decode(configuration: dict[str, Any]) -> RunTaskConfig:
    return decode_configuration(RunTaskConfig, configuration).normalized()


class RunTask(Component):
    """Starts one or more tasks from an ECS task definition."""

    @property
    def name(self) -> str:
        return "aws.ecs.runTask"

    @property
    def label(self) -> str:
        return "ECS • Run Task"

    @property
    def description(self) -> str:
        return "Run a task in AWS ECS"

    async def setup(self, ctx: SetupContext) -> None:
        config = _decode(ctx.configuration)

        if not config.region:
            raise ComponentError("region is required")
        if not config.cluster:
            raise ComponentError("cluster is required")
        if not config.task_definition:
            raise ComponentError("task definition is required")
        if config.count < 0:
            raise ComponentError("count cannot be negative")
        if config.launch_type and config.launch_type not in ALLOWED_LAUNCH_TYPES:
            raise ComponentError(f"invalid launch type: {config.launch_type}")

    async def execute(self, ctx: ExecutionContext) -> None:
        config = _decode(ctx.configuration)

        request = RunTaskRequest(
            cluster=config.cluster,
            task_definition=config.task_definition,
            count=config.count or None,
            launch_type=config.launch_type or None,
            group=config.group or None,
            started_by=config.started_by or None,
            platform_version=config.platform_version or None,
            enable_execute_command=config.enable_execute_command,
            network_configuration=optional_object(
                config.network_configuration, DEFAULT_NETWORK_CONFIGURATION
            ),
            overrides=optional_object(config.overrides, DEFAULT_OVERRIDES),
        )

        async with new_client(ctx, config.region) as client:
            try:
                response = await client.run_task(request)
            except IntegrationError as e:
                raise ComponentError(f"failed to run ECS task: {e.message}") from e

        if not response.tasks and response.failures:
            failure = response.failures[0]
            raise ComponentError(
                f"failed to run ECS task: {failure.reason.strip()} ({failure.detail.strip()})"
            )

        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            PAYLOAD_TYPE,
            [embed_json({"tasks": response.tasks, "failures": response.failures})],
        )
