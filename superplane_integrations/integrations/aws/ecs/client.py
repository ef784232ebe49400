"""
Amazon ECS API Client.

ECS speaks the AWS JSON 1.1 protocol: every operation is a POST to the
regional endpoint root with the operation named in X-Amz-Target. Requests
are signed with SigV4 through botocore's signer.

Usage:
    async with ECSClient(ECSConfig(region="us-east-1"), credentials) as client:
        response = await client.run_task(
            RunTaskRequest(cluster="demo", task_definition="worker:1", count=1)
        )

API Reference:
    https://docs.aws.amazon.com/AmazonECS/latest/APIReference/Welcome.html
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest

from superplane_integrations.integrations.aws.credentials import AWSCredentials
from superplane_integrations.integrations.aws.ecs.schemas import (
    RunTaskRequest,
    RunTaskResponse,
    StopTaskRequest,
    StopTaskResponse,
)
from superplane_integrations.integrations.base import IntegrationClient, IntegrationConfig

logger = logging.getLogger(__name__)

TARGET_PREFIX = "AmazonEC2ContainerServiceV20141113"
CONTENT_TYPE = "application/x-amz-json-1.1"
SERVICE_NAME = "ecs"


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class ECSConfig(IntegrationConfig):
    """Configuration for the ECS client. base_url is derived from region."""

    region: str = ""

    def __post_init__(self):
        if not self.region:
            raise ValueError("AWS region is required")
        if not self.base_url:
            object.__setattr__(self, "base_url", f"https://ecs.{self.region}.amazonaws.com")


# =============================================================================
# Client
# =============================================================================


class ECSClient(IntegrationClient):
    """
    Async client for the ECS JSON API.

    Authentication is per request (SigV4 covers the body), so
    _get_auth_headers() is empty and _call() signs each request.
    """

    def __init__(
        self,
        config: ECSConfig,
        credentials: AWSCredentials,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config, transport=transport)
        self._config: ECSConfig = config
        self._credentials = credentials

    @property
    def name(self) -> str:
        return "aws.ecs"

    @property
    def region(self) -> str:
        return self._config.region

    def _get_auth_headers(self) -> dict[str, str]:
        return {}

    def _error_detail(self, response: httpx.Response) -> str:
        """Render AWS JSON errors as "Type: message"."""
        try:
            body = response.json()
        except ValueError:
            return response.text

        if not isinstance(body, dict):
            return response.text

        error_type = str(body.get("__type", "")).rsplit("#", 1)[-1]
        message = body.get("message") or body.get("Message") or ""
        if error_type and message:
            return f"{error_type}: {message}"
        return error_type or message or response.text

    def _sign(self, operation: str, body: bytes) -> dict[str, str]:
        """Return the headers for a SigV4-signed request to operation."""
        url = f"{self._config.base_url}/"
        request = AWSRequest(
            method="POST",
            url=url,
            data=body,
            headers={
                "Content-Type": CONTENT_TYPE,
                "X-Amz-Target": f"{TARGET_PREFIX}.{operation}",
            },
        )
        SigV4Auth(self._credentials.to_botocore(), SERVICE_NAME, self.region).add_auth(request)
        return dict(request.headers.items())

    async def _call(self, operation: str, payload: dict[str, Any]) -> dict[str, Any]:
        body = json.dumps(payload).encode("utf-8")
        response = await self._request(
            "POST",
            "/",
            content=body,
            headers=self._sign(operation, body),
        )
        if not response.content:
            return {}
        return response.json()

    # =========================================================================
    # Tasks
    # =========================================================================

    async def run_task(self, request: RunTaskRequest) -> RunTaskResponse:
        """
        Start one or more tasks from a task definition.

        Failures ECS reports inside a 200 response (missing task
        definition, no capacity) are returned in RunTaskResponse.failures.
        """
        logger.info(
            f"[aws.ecs] Running task {request.task_definition} on cluster "
            f"{request.cluster} in {self.region}"
        )
        data = await self._call("RunTask", request.to_api_dict())
        return RunTaskResponse.model_validate(data)

    async def stop_task(self, request: StopTaskRequest) -> StopTaskResponse:
        """Stop a running task."""
        logger.info(f"[aws.ecs] Stopping task {request.task} on cluster {request.cluster}")
        data = await self._call("StopTask", request.to_api_dict())
        return StopTaskResponse.model_validate(data)
