"""
Pydantic schemas for the ECS JSON API.

Only the fields the components read are declared; everything else ECS
returns is kept through extra="allow" so emitted payloads carry the
full task description.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ECSModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Container(ECSModel):
    container_arn: str | None = None
    name: str | None = None
    last_status: str | None = None
    exit_code: int | None = None
    reason: str | None = None


class Task(ECSModel):
    """An ECS task as returned by RunTask/StopTask."""

    task_arn: str = ""
    cluster_arn: str | None = None
    task_definition_arn: str | None = None
    last_status: str | None = None
    desired_status: str | None = None
    launch_type: str | None = None
    group: str | None = None
    started_by: str | None = None
    stopped_reason: str | None = None
    containers: list[Container] = Field(default_factory=list)


class Failure(ECSModel):
    arn: str | None = None
    reason: str = ""
    detail: str = ""


class RunTaskRequest(ECSModel):
    """Body of AmazonEC2ContainerServiceV20141113.RunTask."""

    cluster: str
    task_definition: str
    count: int | None = None
    launch_type: str | None = None
    group: str | None = None
    started_by: str | None = None
    platform_version: str | None = None
    enable_execute_command: bool | None = None
    network_configuration: dict[str, Any] | None = None
    overrides: dict[str, Any] | None = None

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to API request format, dropping unset and empty values."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if not self.enable_execute_command:
            data.pop("enableExecuteCommand", None)
        for key in ("launchType", "group", "startedBy", "platformVersion"):
            if data.get(key) == "":
                data.pop(key)
        return data


class RunTaskResponse(ECSModel):
    tasks: list[Task] = Field(default_factory=list)
    failures: list[Failure] = Field(default_factory=list)


class StopTaskRequest(ECSModel):
    cluster: str
    task: str
    reason: str | None = None

    def to_api_dict(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_none=True)
        if not data.get("reason"):
            data.pop("reason", None)
        return data


class StopTaskResponse(ECSModel):
    task: Task | None = None
