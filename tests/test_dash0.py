"""
Tests for the Dash0 integration.

Tests cover:
- URL normalization and list response parsing
- Prometheus queries, check rule / synthetic check upserts, log ingest
- OnAlertEvent webhook normalization and filtering
"""

import json
import re
from urllib.parse import parse_qs

import httpx
import pytest

from conftest import RecordingTransport, json_response
from superplane_integrations.core import (
    ComponentError,
    ExecutionContext,
    IntegrationContext,
    SetupContext,
    SyncContext,
    TriggerContext,
    WebhookRequestContext,
)
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.dash0 import (
    CreateCheckRule,
    CreateSyntheticCheck,
    Dash0Client,
    Dash0Config,
    Dash0Integration,
    OnAlertEvent,
    QueryPrometheus,
    SendLogEvent,
    UpdateCheckRule,
    UpdateSyntheticCheck,
)
from superplane_integrations.integrations.dash0.client import (
    MAX_RESPONSE_SIZE,
    derive_logs_ingest_url,
    normalize_base_url,
    parse_check_rules,
    parse_json_response,
)
from superplane_integrations.integrations.dash0.on_alert_event import normalize_alert_event
from superplane_integrations.integrations.dash0.send_log_event import (
    normalize_severity,
    parse_record_timestamp,
)
from superplane_integrations.integrations.dash0.specification import (
    UpsertSyntheticCheckConfig,
    build_synthetic_check_specification,
    parse_check_rule_specification,
)

# =============================================================================
# Fixtures
# =============================================================================

BASE_URL = "https://api.us-west-2.aws.dash0.com"


@pytest.fixture
def integration():
    return IntegrationContext(
        configuration={"apiToken": "auth_token", "baseURL": BASE_URL + "/", "dataset": ""}
    )


# =============================================================================
# Client Tests
# =============================================================================


class TestUrls:
    def test_normalize_base_url(self):
        """Trailing slash and a pasted Prometheus suffix are removed."""
        assert normalize_base_url(f"{BASE_URL}/api/prometheus/") == BASE_URL

    def test_logs_ingest_url(self):
        assert (
            derive_logs_ingest_url("https://api.eu-west-1.aws.dash0.com/some/path")
            == "https://ingress.eu-west-1.aws.dash0.com"
        )

    def test_logs_ingest_url_keeps_other_hosts(self):
        assert derive_logs_ingest_url("http://localhost:8080/x") == "http://localhost:8080"

    def test_config_requires_base_url(self):
        with pytest.raises(ValueError, match="baseURL is required"):
            Dash0Config(api_token="t", base_url=" ")


class TestResponseParsing:
    def test_parse_json_response_shapes(self):
        assert parse_json_response(b"") == {}
        assert parse_json_response(b'[{"id": 1}]') == {"items": [{"id": 1}]}

    def test_parse_json_response_rejects_scalars(self):
        with pytest.raises(ValueError, match="unexpected response payload shape"):
            parse_json_response(b"42")

    def test_check_rules_from_id_list(self):
        rules = parse_check_rules(b'["rule-a", " ", "rule-b"]')
        assert [rule.id for rule in rules] == ["rule-a", "rule-b"]

    def test_check_rules_from_data_envelope(self):
        rules = parse_check_rules(b'{"data": [{"checkRuleId": "r1", "title": "Errors"}, {"x": 1}]}')
        assert len(rules) == 1
        assert rules[0].id == "r1"
        assert rules[0].origin == "r1"
        assert rules[0].name == "Errors"


class TestCheckDetails:
    @pytest.mark.asyncio
    async def test_falls_back_to_check_rule(self):
        """A 404 on failed-checks retries against check-rules."""
        transport = RecordingTransport(
            [
                json_response(404, {"error": "not found"}),
                json_response(200, {"name": "High latency"}),
            ]
        )
        client = Dash0Client(Dash0Config(api_token="t", base_url=BASE_URL), transport=transport)

        async with client:
            details = await client.get_check_details(" check-1 ", include_history=True)

        first, second = transport.requests
        assert first.url.path == "/api/alerting/failed-checks/check-1"
        assert second.url.path == "/api/alerting/check-rules/check-1"
        assert second.url.params["include_history"] == "true"
        assert second.url.params["dataset"] == "default"
        assert details == {"name": "High latency", "checkId": "check-1"}


class ChunkedBody(httpx.AsyncByteStream):
    """Response body served in fixed-size chunks, counting how many were read."""

    def __init__(self, total: int, chunk_size: int = 64 * 1024):
        self.total = total
        self.chunk_size = chunk_size
        self.chunks_read = 0

    async def __aiter__(self):
        sent = 0
        while sent < self.total:
            size = min(self.chunk_size, self.total - sent)
            self.chunks_read += 1
            sent += size
            yield b" " * size


class TestResponseSizeLimit:
    @pytest.mark.asyncio
    async def test_body_below_limit_is_parsed(self):
        body = b"[" + b" " * (MAX_RESPONSE_SIZE - 3) + b"]"
        assert len(body) == MAX_RESPONSE_SIZE - 1
        transport = RecordingTransport([httpx.Response(200, content=body)])
        client = Dash0Client(Dash0Config(api_token="t", base_url=BASE_URL), transport=transport)

        async with client:
            assert await client.list_check_rules() == []

    @pytest.mark.asyncio
    async def test_body_at_limit_rejected(self):
        body = b"[" + b" " * (MAX_RESPONSE_SIZE - 2) + b"]"
        transport = RecordingTransport([httpx.Response(200, content=body)])
        client = Dash0Client(Dash0Config(api_token="t", base_url=BASE_URL), transport=transport)

        async with client:
            with pytest.raises(IntegrationError, match="list check rules: response too large"):
                await client.list_check_rules()

    @pytest.mark.asyncio
    async def test_reading_stops_at_limit(self):
        """A 4 MiB body is not read past the first MiB."""
        stream = ChunkedBody(4 * MAX_RESPONSE_SIZE)
        transport = RecordingTransport([httpx.Response(200, stream=stream)])
        client = Dash0Client(Dash0Config(api_token="t", base_url=BASE_URL), transport=transport)

        async with client:
            with pytest.raises(IntegrationError, match="response too large"):
                await client.list_check_rules()

        assert stream.chunks_read == MAX_RESPONSE_SIZE // stream.chunk_size

    @pytest.mark.asyncio
    async def test_null_listing_is_empty(self):
        transport = RecordingTransport([json_response(200, "null")])
        client = Dash0Client(Dash0Config(api_token="t", base_url=BASE_URL), transport=transport)

        async with client:
            assert await client.list_synthetic_checks() == []


class TestDash0Integration:
    @pytest.mark.asyncio
    async def test_sync(self, integration):
        transport = RecordingTransport([json_response(200, [{"id": "r1"}])])

        await Dash0Integration().sync(SyncContext(integration=integration, transport=transport))

        assert transport.last.url.path == "/api/alerting/check-rules"
        assert transport.last.headers["Authorization"] == "Bearer auth_token"
        assert integration.state == "ready"

    @pytest.mark.asyncio
    async def test_sync_auth_failure(self, integration):
        transport = RecordingTransport([json_response(401, {"error": "unauthorized"})])

        with pytest.raises(ComponentError, match="error validating connection"):
            await Dash0Integration().sync(SyncContext(integration=integration, transport=transport))

    @pytest.mark.asyncio
    async def test_missing_base_url(self):
        integration = IntegrationContext(configuration={"apiToken": "t"})
        with pytest.raises(ComponentError, match="baseURL is required"):
            await Dash0Integration().sync(SyncContext(integration=integration))


# =============================================================================
# Query Prometheus Tests
# =============================================================================


class TestQueryPrometheus:
    @pytest.mark.asyncio
    async def test_instant_query(self, integration):
        result = {"resultType": "vector", "result": []}
        transport = RecordingTransport([json_response(200, {"status": "success", "data": result})])
        ctx = ExecutionContext(
            configuration={"query": " up "},
            integration=integration,
            transport=transport,
        )

        await QueryPrometheus().execute(ctx)

        request = transport.last
        assert str(request.url) == f"{BASE_URL}/api/prometheus/api/v1/query"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert parse_qs(request.content.decode()) == {"dataset": ["default"], "query": ["up"]}
        assert ctx.execution_state.payload_type == "dash0.prometheus.response"
        assert ctx.execution_state.payloads == [{"status": "success", "data": result}]

    @pytest.mark.asyncio
    async def test_range_query(self, integration):
        transport = RecordingTransport([json_response(200, {"status": "success", "data": {}})])
        ctx = ExecutionContext(
            configuration={
                "query": "up",
                "type": "range",
                "dataset": "prod",
                "start": "2024-01-01T00:00:00Z",
                "end": "2024-01-01T01:00:00Z",
                "step": "60s",
            },
            integration=integration,
            transport=transport,
        )

        await QueryPrometheus().execute(ctx)

        assert transport.last.url.path == "/api/prometheus/api/v1/query_range"
        form = parse_qs(transport.last.content.decode())
        assert form["dataset"] == ["prod"]
        assert form["step"] == ["60s"]

    @pytest.mark.asyncio
    async def test_non_success_status(self, integration):
        transport = RecordingTransport([json_response(200, {"status": "error", "error": "bad"})])
        ctx = ExecutionContext(configuration={"query": "up"}, integration=integration, transport=transport)

        with pytest.raises(ComponentError, match="non-success status: error"):
            await QueryPrometheus().execute(ctx)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "configuration,message",
        [
            ({"query": " "}, "query is required"),
            ({"query": "up", "type": "table"}, "invalid query type: table"),
            (
                {"query": "up", "type": "range", "start": "a", "end": "b"},
                "step is required for range queries",
            ),
        ],
    )
    async def test_setup_validation(self, configuration, message):
        with pytest.raises(ComponentError, match=message):
            await QueryPrometheus().setup(SetupContext(configuration=configuration))


# =============================================================================
# Check Rule Tests
# =============================================================================


class TestCheckRuleSpecification:
    def test_prometheus_rule_file(self):
        """Recording rules are skipped and the group interval applies."""
        spec = json.dumps(
            {
                "groups": [
                    {
                        "name": "api",
                        "interval": "1m",
                        "rules": [
                            {"record": "job:up", "expr": "sum(up)"},
                            {
                                "alert": "Down",
                                "expr": "up == 0",
                                "for": "2m",
                                "labels": {"severity": "page"},
                            },
                        ],
                    }
                ]
            }
        )

        assert parse_check_rule_specification(spec, "spec", "scope") == {
            "name": "Down",
            "expression": "up == 0",
            "interval": "1m",
            "for": "2m",
            "labels": {"severity": "page"},
        }

    def test_multiple_alert_rules_rejected(self):
        spec = json.dumps(
            {"groups": [{"rules": [{"alert": "A", "expr": "x"}, {"alert": "B", "expr": "y"}]}]}
        )
        with pytest.raises(ComponentError, match="exactly one alert rule; found 2"):
            parse_check_rule_specification(spec, "spec", "scope")

    def test_single_item_array(self):
        spec = '[{"alert": "A", "expr": "x", "keep_firing_for": "5m"}]'
        assert parse_check_rule_specification(spec, "spec", "scope") == {
            "name": "A",
            "expression": "x",
            "keepFiringFor": "5m",
        }

    def test_non_string_label_rejected(self):
        spec = '{"name": "A", "expression": "x", "labels": {"tier": 1}}'
        with pytest.raises(ComponentError, match="spec.labels.tier must be a string"):
            parse_check_rule_specification(spec, "spec", "scope")


class TestCheckRuleComponents:
    @pytest.mark.asyncio
    async def test_create_from_form_fields(self, integration):
        """Without originOrId a superplane-check-rule-* id is generated."""
        transport = RecordingTransport([json_response(200, {"id": "generated"})])
        ctx = ExecutionContext(
            configuration={
                "name": "High error rate",
                "expression": "rate(errors[5m]) > 1",
                "for": "5m",
                "labels": [{"key": "severity", "value": "critical"}, {"key": " ", "value": "x"}],
            },
            integration=integration,
            transport=transport,
        )

        await CreateCheckRule().execute(ctx)

        request = transport.last
        assert request.method == "PUT"
        assert re.fullmatch(r"/api/alerting/check-rules/superplane-check-rule-[0-9a-f]{8}", request.url.path)
        assert request.url.params["dataset"] == "default"
        assert transport.json_body() == {
            "name": "High error rate",
            "expression": "rate(errors[5m]) > 1",
            "for": "5m",
            "labels": {"severity": "critical"},
        }

        payload = ctx.execution_state.payloads[0]
        assert ctx.execution_state.payload_type == "dash0.check.rule.created"
        assert payload["originOrId"].startswith("superplane-check-rule-")
        assert payload["response"]["id"] == "generated"
        assert payload["response"]["originOrId"] == payload["originOrId"]

    @pytest.mark.asyncio
    async def test_update_requires_origin(self):
        with pytest.raises(ComponentError, match="dash0.updateCheckRule setup: originOrId is required"):
            await UpdateCheckRule().setup(
                SetupContext(configuration={"name": "A", "expression": "x"})
            )

    @pytest.mark.asyncio
    async def test_create_requires_expression(self):
        with pytest.raises(ComponentError, match="expression is required"):
            await CreateCheckRule().setup(SetupContext(configuration={"name": "A"}))


# =============================================================================
# Synthetic Check Tests
# =============================================================================


class TestSyntheticChecks:
    def test_specification_from_form_fields(self):
        config = UpsertSyntheticCheckConfig(
            name="Homepage",
            url="https://example.com",
            method="POST",
            request_body='{"ping": true}',
            headers=[{"key": "X-Probe", "value": "1"}],
        )

        assert build_synthetic_check_specification(config, "scope") == {
            "kind": "Dash0SyntheticCheck",
            "metadata": {"name": "Homepage"},
            "spec": {
                "enabled": True,
                "plugin": {
                    "kind": "http",
                    "spec": {
                        "request": {
                            "method": "post",
                            "url": "https://example.com",
                            "headers": [{"name": "X-Probe", "value": "1"}],
                            "body": '{"ping": true}',
                        }
                    },
                },
            },
        }

    def test_body_dropped_for_get(self):
        config = UpsertSyntheticCheckConfig(
            name="Homepage", url="https://example.com", request_body="ignored"
        )
        request = build_synthetic_check_specification(config, "scope")["spec"]["plugin"]["spec"]["request"]
        assert request == {"method": "get", "url": "https://example.com"}

    @pytest.mark.asyncio
    async def test_wrong_kind_rejected(self):
        ctx = SetupContext(configuration={"spec": '{"kind": "Check", "spec": {}}'})
        with pytest.raises(ComponentError, match=re.escape('spec.kind must be "Dash0SyntheticCheck"')):
            await CreateSyntheticCheck().setup(ctx)

    @pytest.mark.asyncio
    async def test_update_normalizes_kinds(self, integration):
        transport = RecordingTransport([json_response(200, {})])
        ctx = ExecutionContext(
            configuration={
                "originOrId": "homepage",
                "spec": {"kind": "dash0syntheticcheck", "spec": {"plugin": {"kind": " HTTP "}}},
            },
            integration=integration,
            transport=transport,
        )

        await UpdateSyntheticCheck().execute(ctx)

        assert transport.last.url.path == "/api/synthetic-checks/homepage"
        body = transport.json_body()
        assert body["kind"] == "Dash0SyntheticCheck"
        assert body["spec"]["plugin"]["kind"] == "http"
        assert ctx.execution_state.payload_type == "dash0.synthetic.check.updated"
        assert ctx.execution_state.payloads == [
            {"originOrId": "homepage", "response": {"originOrId": "homepage"}}
        ]

    @pytest.mark.asyncio
    async def test_update_server_error(self, integration):
        transport = RecordingTransport([json_response(500, "boom")])
        ctx = ExecutionContext(
            configuration={
                "originOrId": "homepage",
                "spec": {"kind": "Dash0SyntheticCheck", "spec": {"plugin": {"kind": "http"}}},
            },
            integration=integration,
            transport=transport,
        )

        with pytest.raises(ComponentError) as exc_info:
            await UpdateSyntheticCheck().execute(ctx)

        assert str(exc_info.value) == (
            'dash0.updateSyntheticCheck execute: update synthetic check "homepage": '
            "dash0 client: upsert synthetic check: request got 500 code: boom"
        )


# =============================================================================
# Send Log Event Tests
# =============================================================================


class TestLogHelpers:
    def test_severity(self):
        assert normalize_severity("warning") == ("WARN", 13)
        assert normalize_severity("") == ("INFO", 9)
        assert normalize_severity("verbose") == ("INFO", 9)

    def test_timestamp_numbers(self):
        assert parse_record_timestamp(1_700_000_000) == 1_700_000_000_000_000_000
        assert parse_record_timestamp("1700000000000") == 1_700_000_000_000_000_000

    def test_timestamp_invalid(self):
        with pytest.raises(ValueError, match="unsupported timestamp format"):
            parse_record_timestamp("soon")

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_timestamp_non_finite(self, value):
        with pytest.raises(ValueError, match="unsupported timestamp value"):
            parse_record_timestamp(value)


class TestSendLogEvent:
    @pytest.mark.asyncio
    async def test_sends_otlp_request(self, integration):
        transport = RecordingTransport([json_response(200, {})])
        ctx = ExecutionContext(
            configuration={
                "serviceName": "checkout",
                "records": [
                    {
                        "message": "deploy finished",
                        "severity": "warning",
                        "timestamp": "2024-01-01T00:00:00Z",
                        "attributes": {"env": "prod", "replicas": 3},
                    }
                ],
            },
            integration=integration,
            transport=transport,
        )

        await SendLogEvent().execute(ctx)

        assert str(transport.last.url) == "https://ingress.us-west-2.aws.dash0.com/v1/logs"
        resource_logs = transport.json_body()["resourceLogs"][0]
        assert resource_logs["resource"]["attributes"] == [
            {"key": "service.name", "value": {"stringValue": "checkout"}}
        ]
        record = resource_logs["scopeLogs"][0]["logRecords"][0]
        assert record == {
            "timeUnixNano": "1704067200000000000",
            "severityText": "WARN",
            "severityNumber": 13,
            "body": {"stringValue": "deploy finished"},
            "attributes": [
                {"key": "env", "value": {"stringValue": "prod"}},
                {"key": "replicas", "value": {"intValue": "3"}},
            ],
        }

        assert ctx.execution_state.payload_type == "dash0.log.event.sent"
        assert ctx.execution_state.payloads == [
            {"serviceName": "checkout", "sentCount": 1, "response": {}}
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "records,message",
        [
            ([], "records is required"),
            ([{"message": "x"}] * 51, "records cannot exceed 50"),
            ([{"message": " "}], r"record\[0\]: message is required"),
            ([{"message": "x", "timestamp": "soon"}], r"record\[0\]: invalid timestamp"),
            ([{"message": "x", "timestamp": float("inf")}], r"record\[0\]: invalid timestamp"),
        ],
    )
    async def test_setup_validation(self, records, message):
        with pytest.raises(ComponentError, match=message):
            await SendLogEvent().setup(SetupContext(configuration={"records": records}))


# =============================================================================
# On Alert Event Tests
# =============================================================================


ALERT_EVENT = {
    "type": "Triggered",
    "check": {
        "id": "check-1",
        "name": "High CPU",
        "severity": "CRITICAL",
        "labels": {"team": "ops"},
        "summary": "CPU above 90%",
    },
    "timestamp": 1_700_000_000,
}


class TestNormalizeAlertEvent:
    def test_nested_fields(self):
        event = normalize_alert_event(ALERT_EVENT)

        assert event.event_type == "fired"
        assert event.check_id == "check-1"
        assert event.check_name == "High CPU"
        assert event.severity == "critical"
        assert event.labels == {"team": "ops"}
        assert event.summary == "CPU above 90%"
        assert event.timestamp == "2023-11-14T22:13:20Z"

    def test_resolved_synonyms(self):
        event = normalize_alert_event({"status": "Recovered", "checkId": 42})
        assert event.event_type == "resolved"
        assert event.check_id == "42"


class TestOnAlertEvent:
    @pytest.mark.asyncio
    async def test_setup_requests_webhook(self):
        ctx = TriggerContext(configuration={"eventTypes": ["fired"]})
        await OnAlertEvent().setup(ctx)
        assert ctx.integration.webhook_requests == [{"eventTypes": ["fired"]}]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("configuration", [{"eventTypes": []}, {}])
    async def test_setup_requires_event_types(self, configuration):
        with pytest.raises(ComponentError, match="at least one event type"):
            await OnAlertEvent().setup(TriggerContext(configuration=configuration))

    @pytest.mark.asyncio
    async def test_out_of_range_timestamp_falls_back_to_now(self):
        """1e400 decodes to infinity and is treated like a missing timestamp."""
        ctx = WebhookRequestContext(
            body=b'{"data": {"eventType": "fired", "checkId": "c1", "timestamp": 1e400}}'
        )

        result = await OnAlertEvent().handle_webhook(ctx)

        assert result.status_code == 200
        assert len(ctx.events) == 1
        payload = ctx.events.events[0].payloads[0]
        assert payload["checkId"] == "c1"
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z", payload["timestamp"])

    @pytest.mark.asyncio
    async def test_emits_event(self):
        ctx = WebhookRequestContext(body=json.dumps({"data": ALERT_EVENT}).encode())

        result = await OnAlertEvent().handle_webhook(ctx)

        assert not result.is_error
        assert len(ctx.events) == 1
        emission = ctx.events.events[0]
        assert emission.payload_type == "dash0.alert.event"
        payload = emission.payloads[0]
        assert payload["eventType"] == "fired"
        assert payload["checkId"] == "check-1"
        assert payload["event"] == ALERT_EVENT

    @pytest.mark.asyncio
    async def test_unselected_event_type_ignored(self):
        ctx = WebhookRequestContext(
            body=json.dumps({"data": {"state": "resolved", "checkId": "c"}}).encode(),
            configuration={"eventTypes": ["fired"]},
        )

        result = await OnAlertEvent().handle_webhook(ctx)

        assert result.status_code == 200
        assert len(ctx.events) == 0

    @pytest.mark.asyncio
    async def test_unknown_event_type_ignored(self):
        ctx = WebhookRequestContext(body=b'{"data": {"type": "acknowledged", "checkId": "c"}}')
        result = await OnAlertEvent().handle_webhook(ctx)
        assert result.status_code == 200
        assert len(ctx.events) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body,message",
        [
            (b"", "empty request body"),
            (b"{not json", "parse request body"),
            (b'{"data": {"type": "fired"}}', "check id is required"),
        ],
    )
    async def test_bad_requests(self, body, message):
        ctx = WebhookRequestContext(body=body)

        result = await OnAlertEvent().handle_webhook(ctx)

        assert result.status_code == 400
        assert message in result.error
        assert len(ctx.events) == 0
