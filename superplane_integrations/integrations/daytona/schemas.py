"""Pydantic models for the Daytona API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SUPPORTED_LANGUAGES = ("python", "javascript", "typescript")


class DaytonaModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Sandbox(DaytonaModel):
    id: str = ""
    state: str = ""
    target: str | None = None
    snapshot: str | None = None
    organization_id: str | None = None
    env: dict[str, str] | None = None
    labels: dict[str, str] | None = None


class CreateSandboxRequest(DaytonaModel):
    snapshot: str | None = None
    target: str | None = None
    auto_stop_interval: int | None = None
    env: dict[str, str] | None = None
    labels: dict[str, str] | None = None

    def to_api_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ToolboxProxy(DaytonaModel):
    proxy_toolbox_url: str = ""
    url: str = ""

    @property
    def base_url(self) -> str:
        return (self.proxy_toolbox_url or self.url).rstrip("/")


class ExecuteCommandRequest(DaytonaModel):
    command: str
    cwd: str | None = None
    timeout: int | None = None

    def to_api_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ExecuteCommandResponse(DaytonaModel):
    exit_code: int = 0
    result: str = ""


class ExecuteCodeRequest(DaytonaModel):
    code: str
    language: str = "python"
    timeout: int | None = None
