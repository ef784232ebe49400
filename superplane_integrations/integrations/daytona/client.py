"""
Daytona API Client.

Sandboxes are managed through the control-plane API; commands run
inside a sandbox go through the toolbox proxy, whose URL is looked up
per sandbox before each execution.

Usage:
    async with DaytonaClient(DaytonaConfig(api_key="...")) as client:
        sandbox = await client.create_sandbox(CreateSandboxRequest(target="us"))
        result = await client.execute_command(
            sandbox.id,
            ExecuteCommandRequest(command="echo hello"),
        )

API Reference:
    https://www.daytona.io/docs/tools/api/
"""

from __future__ import annotations

import base64
import logging
import shlex
from dataclasses import dataclass

import httpx

from superplane_integrations.integrations.base import (
    IntegrationClient,
    IntegrationConfig,
    IntegrationError,
    ValidationError,
)
from superplane_integrations.integrations.daytona.schemas import (
    SUPPORTED_LANGUAGES,
    CreateSandboxRequest,
    ExecuteCodeRequest,
    ExecuteCommandRequest,
    ExecuteCommandResponse,
    Sandbox,
    ToolboxProxy,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.daytona.io/api"

_TYPESCRIPT_SOURCE = "/tmp/superplane-code.ts"


@dataclass(frozen=True, slots=True)
class DaytonaConfig(IntegrationConfig):
    """Configuration for Daytona client."""

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self):
        if not self.api_key:
            raise ValueError("apiKey is required")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/") or DEFAULT_BASE_URL)


def build_code_command(code: str, language: str) -> str:
    """
    Wrap source code into a shell command for the given language.

    The source is shipped base64-encoded so quoting inside the code never
    interferes with the shell.

    Raises:
        ValueError: For languages other than python, javascript, typescript
    """
    encoded = base64.b64encode(code.encode("utf-8")).decode("ascii")
    decode = f"echo {shlex.quote(encoded)} | base64 -d"

    if language == "python":
        script = f"{decode} | python3 -u -"
    elif language == "javascript":
        script = f"{decode} | node -"
    elif language == "typescript":
        script = f"{decode} > {_TYPESCRIPT_SOURCE} && npx --yes ts-node -T {_TYPESCRIPT_SOURCE}"
    else:
        raise ValueError(
            f"unsupported language: {language} (expected one of {', '.join(SUPPORTED_LANGUAGES)})"
        )
    return f"sh -c {shlex.quote(script)}"


class DaytonaClient(IntegrationClient):
    """Async client for the Daytona API (Bearer API key auth)."""

    def __init__(
        self,
        config: DaytonaConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config, transport=transport)
        self._config: DaytonaConfig = config

    @property
    def name(self) -> str:
        return "daytona"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.api_key}"}

    def _error_detail(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return response.text

    async def verify(self) -> None:
        """Check the API key by listing sandboxes."""
        await self._request("GET", "/sandbox")

    async def create_sandbox(self, request: CreateSandboxRequest) -> Sandbox:
        logger.info(f"[daytona] Creating sandbox (target={request.target or 'default'})")
        response = await self._request("POST", "/sandbox", json=request.to_api_dict())
        return Sandbox.model_validate(response.json())

    async def get_toolbox_proxy_url(self, sandbox_id: str) -> str:
        response = await self._request("GET", f"/sandbox/{sandbox_id}/toolbox-proxy-url")
        proxy = ToolboxProxy.model_validate(response.json())
        if not proxy.base_url:
            raise IntegrationError("toolbox proxy URL missing from response", self.name)
        return proxy.base_url

    async def execute_command(
        self,
        sandbox_id: str,
        request: ExecuteCommandRequest,
    ) -> ExecuteCommandResponse:
        proxy_url = await self.get_toolbox_proxy_url(sandbox_id)
        logger.info(f"[daytona] Executing command in sandbox {sandbox_id}")
        response = await self._request(
            "POST",
            f"{proxy_url}/{sandbox_id}/process/execute",
            json=request.to_api_dict(),
        )
        return ExecuteCommandResponse.model_validate(response.json())

    async def execute_code(
        self,
        sandbox_id: str,
        request: ExecuteCodeRequest,
    ) -> ExecuteCommandResponse:
        try:
            command = build_code_command(request.code, request.language)
        except ValueError as e:
            raise ValidationError(str(e), self.name) from e

        return await self.execute_command(
            sandbox_id,
            ExecuteCommandRequest(command=command, timeout=request.timeout),
        )

    async def delete_sandbox(self, sandbox_id: str, force: bool = False) -> None:
        logger.info(f"[daytona] Deleting sandbox {sandbox_id} (force={force})")
        await self._request(
            "DELETE",
            f"/sandbox/{sandbox_id}",
            params={"force": "true" if force else "false"},
        )
