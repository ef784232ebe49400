"""
Amazon ECS components.

- RunTask: start tasks from a task definition (payload "aws.ecs.task")
- StopTask: stop a running task (payload "aws.ecs.task.stopped")
"""

from superplane_integrations.integrations.aws.ecs.client import ECSClient, ECSConfig
from superplane_integrations.integrations.aws.ecs.run_task import RunTask, RunTaskConfig
from superplane_integrations.integrations.aws.ecs.schemas import (
    Failure,
    RunTaskRequest,
    RunTaskResponse,
    StopTaskRequest,
    StopTaskResponse,
    Task,
)
from superplane_integrations.integrations.aws.ecs.stop_task import StopTask, StopTaskConfig

__all__ = [
    "ECSClient",
    "ECSConfig",
    "Failure",
    "RunTask",
    "RunTaskConfig",
    "RunTaskRequest",
    "RunTaskResponse",
    "StopTask",
    "StopTaskConfig",
    "StopTaskRequest",
    "StopTaskResponse",
    "Task",
]
