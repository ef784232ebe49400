"""
Tests for the Grafana integration.
"""

import pytest

from conftest import RecordingTransport, json_response
from superplane_integrations.core import (
    ComponentError,
    ExecutionContext,
    IntegrationContext,
    SetupContext,
    SyncContext,
)
from superplane_integrations.integrations.grafana import (
    GrafanaConfig,
    GrafanaIntegration,
    QueryDataSource,
)

# =============================================================================
# Fixtures
# =============================================================================

GRAFANA_URL = "https://grafana.example.com"

FRAMES = [{"schema": {"fields": [{"name": "time"}, {"name": "value"}]}, "data": {"values": [[1], [2]]}}]


@pytest.fixture
def integration():
    return IntegrationContext(configuration={"baseURL": GRAFANA_URL + "/", "apiToken": "glsa_token"})


# =============================================================================
# Client / Integration Tests
# =============================================================================


class TestGrafanaConfig:
    def test_trailing_slash_removed(self):
        assert GrafanaConfig(base_url=f"{GRAFANA_URL}/", api_token="t").base_url == GRAFANA_URL

    def test_base_url_required(self):
        with pytest.raises(ValueError, match="baseURL is required"):
            GrafanaConfig(base_url="", api_token="t")

    def test_token_required(self):
        with pytest.raises(ValueError, match="apiToken is required"):
            GrafanaConfig(base_url=GRAFANA_URL, api_token="")


class TestGrafanaIntegration:
    @pytest.mark.asyncio
    async def test_sync_checks_health(self, integration):
        transport = RecordingTransport(
            [json_response(200, {"database": "ok", "version": "11.0.0", "commit": "abc"})]
        )

        await GrafanaIntegration().sync(SyncContext(integration=integration, transport=transport))

        assert str(transport.last.url) == f"{GRAFANA_URL}/api/health"
        assert transport.last.headers["Authorization"] == "Bearer glsa_token"
        assert integration.state == "ready"

    @pytest.mark.asyncio
    async def test_sync_failure(self, integration):
        transport = RecordingTransport([json_response(401, {"message": "invalid API key"})])

        with pytest.raises(ComponentError, match="error checking Grafana health.*invalid API key"):
            await GrafanaIntegration().sync(SyncContext(integration=integration, transport=transport))

    @pytest.mark.asyncio
    async def test_missing_configuration(self):
        with pytest.raises(ComponentError, match="error creating client: baseURL is required"):
            await GrafanaIntegration().sync(SyncContext(integration=IntegrationContext()))


# =============================================================================
# Query Data Source Tests
# =============================================================================


class TestQueryDataSource:
    @pytest.mark.asyncio
    async def test_runs_query(self, integration):
        transport = RecordingTransport(
            [json_response(200, {"results": {"A": {"status": 200, "frames": FRAMES}}})]
        )
        ctx = ExecutionContext(
            configuration={"dataSourceUid": " prom ", "query": "up"},
            integration=integration,
            transport=transport,
        )

        await QueryDataSource().execute(ctx)

        assert transport.last.method == "POST"
        assert str(transport.last.url) == f"{GRAFANA_URL}/api/ds/query"
        assert transport.json_body() == {
            "queries": [
                {
                    "refId": "A",
                    "datasource": {"uid": "prom"},
                    "expr": "up",
                    "query": "up",
                    "rawSql": "up",
                }
            ],
            "from": "now-1h",
            "to": "now",
        }

        assert ctx.execution_state.payload_type == "grafana.query.result"
        assert ctx.execution_state.payloads == [
            {
                "dataSourceUid": "prom",
                "query": "up",
                "from": "now-1h",
                "to": "now",
                "results": {"A": {"status": 200, "frames": FRAMES}},
            }
        ]

    @pytest.mark.asyncio
    async def test_custom_time_range(self, integration):
        transport = RecordingTransport([json_response(200, {"results": {}})])
        ctx = ExecutionContext(
            configuration={"dataSourceUid": "loki", "query": '{app="api"}', "from": "now-6h", "to": "now-1h"},
            integration=integration,
            transport=transport,
        )

        await QueryDataSource().execute(ctx)

        body = transport.json_body()
        assert body["from"] == "now-6h"
        assert body["to"] == "now-1h"
        assert ctx.execution_state.payloads[0]["from"] == "now-6h"

    @pytest.mark.asyncio
    async def test_per_query_error(self, integration):
        """Grafana reports query errors inside a 200 response."""
        transport = RecordingTransport(
            [json_response(200, {"results": {"A": {"status": 400, "error": "parse error at char 3"}}})]
        )
        ctx = ExecutionContext(
            configuration={"dataSourceUid": "prom", "query": "up{"},
            integration=integration,
            transport=transport,
        )

        with pytest.raises(ComponentError, match="query failed: A: parse error at char 3"):
            await QueryDataSource().execute(ctx)

        assert not ctx.execution_state.emitted

    @pytest.mark.asyncio
    async def test_http_error(self, integration):
        transport = RecordingTransport([json_response(404, {"message": "data source not found"})])
        ctx = ExecutionContext(
            configuration={"dataSourceUid": "missing", "query": "up"},
            integration=integration,
            transport=transport,
        )

        with pytest.raises(ComponentError, match="query failed.*data source not found"):
            await QueryDataSource().execute(ctx)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "configuration,message",
        [
            ({"query": "up"}, "dataSourceUid is required"),
            ({"dataSourceUid": "prom", "query": " "}, "query is required"),
        ],
    )
    async def test_setup_validation(self, configuration, message):
        with pytest.raises(ComponentError, match=message):
            await QueryDataSource().setup(SetupContext(configuration=configuration))
