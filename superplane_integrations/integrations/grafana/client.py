"""
Grafana API Client.

Uses the unified data source query endpoint, so any data source type
Grafana can query (Prometheus, Loki, SQL...) is reachable through one
request shape.

Usage:
    config = GrafanaConfig(base_url="https://grafana.example.com", api_token="glsa_...")
    async with GrafanaClient(config) as client:
        await client.health()
        response = await client.query_data_source(
            DataSourceQueryRequest.single("prom-uid", "up", "now-1h", "now")
        )

API Reference:
    https://grafana.com/docs/grafana/latest/developers/http_api/data_source/
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from superplane_integrations.integrations.base import IntegrationClient, IntegrationConfig
from superplane_integrations.integrations.grafana.schemas import (
    DataSourceQueryRequest,
    DataSourceQueryResponse,
    HealthResponse,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GrafanaConfig(IntegrationConfig):
    """Configuration for Grafana client."""

    api_token: str = ""

    def __post_init__(self):
        if not self.base_url.strip():
            raise ValueError("baseURL is required")
        if not self.api_token:
            raise ValueError("apiToken is required")
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))


class GrafanaClient(IntegrationClient):
    """Async client for a Grafana instance (service account token auth)."""

    def __init__(
        self,
        config: GrafanaConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config, transport=transport)
        self._config: GrafanaConfig = config

    @property
    def name(self) -> str:
        return "grafana"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.api_token}"}

    def _error_detail(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return response.text

    async def health(self) -> HealthResponse:
        response = await self._request("GET", "/api/health")
        return HealthResponse.model_validate(response.json())

    async def query_data_source(self, request: DataSourceQueryRequest) -> DataSourceQueryResponse:
        """
        Run queries through /api/ds/query.

        Grafana answers 200 even when individual queries fail; those
        errors are reported per refId in the response results.
        """
        logger.info(f"[grafana] Querying {len(request.queries)} data source query(ies)")
        response = await self._request("POST", "/api/ds/query", json=request.to_api_dict())
        return DataSourceQueryResponse.model_validate(response.json())
