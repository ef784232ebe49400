"""
Tests for the Cloudflare integration.

Tests cover:
- Zone sync and zone name resolution
- DNS record create/update/delete, including the "failed" channel
- Redirect rule updates (wildcard and expression matches)
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
from superplane_integrations.integrations.cloudflare import (
    CloudflareIntegration,
    CreateDNSRecord,
    DeleteDNSRecord,
    UpdateDNSRecord,
    UpdateRedirectRule,
)

# =============================================================================
# Fixtures
# =============================================================================


def envelope(result=None, success=True, errors=None):
    return {"success": success, "errors": errors or [], "messages": [], "result": result}


@pytest.fixture
def integration():
    return IntegrationContext(
        configuration={"apiToken": "cf-token"},
        metadata={"zones": [{"id": "zone-1", "name": "example.com", "status": "active"}]},
    )


RECORD = {
    "id": "rec-1",
    "type": "A",
    "name": "api.example.com",
    "content": "192.0.2.1",
    "ttl": 300,
    "proxied": False,
}


# =============================================================================
# Integration Tests
# =============================================================================


class TestCloudflareIntegration:
    @pytest.mark.asyncio
    async def test_sync_stores_zones(self):
        integration = IntegrationContext(configuration={"apiToken": "cf-token"})
        transport = RecordingTransport(
            [json_response(200, envelope([{"id": "zone-1", "name": "example.com", "status": "active"}]))]
        )

        await CloudflareIntegration().sync(SyncContext(integration=integration, transport=transport))

        assert transport.last.url.path == "/client/v4/zones"
        assert transport.last.headers["Authorization"] == "Bearer cf-token"
        assert integration.metadata == {
            "zones": [{"id": "zone-1", "name": "example.com", "status": "active"}]
        }
        assert integration.state == "ready"

    @pytest.mark.asyncio
    async def test_sync_missing_token(self):
        with pytest.raises(ComponentError, match="error finding API token"):
            await CloudflareIntegration().sync(SyncContext(integration=IntegrationContext()))

    @pytest.mark.asyncio
    async def test_sync_auth_failure(self):
        integration = IntegrationContext(configuration={"apiToken": "bad"})
        transport = RecordingTransport([json_response(403, envelope(success=False))])

        with pytest.raises(ComponentError, match="error listing zones"):
            await CloudflareIntegration().sync(SyncContext(integration=integration, transport=transport))


# =============================================================================
# Create DNS Record Tests
# =============================================================================


class TestCreateDNSRecordSetup:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "configuration,message",
        [
            ({"type": "A", "name": "api", "content": "1.2.3.4"}, "zone is required"),
            ({"zone": "z", "name": "api", "content": "1.2.3.4"}, "type is required"),
            ({"zone": "z", "type": "PTR", "name": "api", "content": "x"}, "type must be one of"),
            ({"zone": "z", "type": "A", "content": "1.2.3.4"}, "name is required"),
            ({"zone": "z", "type": "A", "name": "api"}, "content is required"),
            (
                {"zone": "z", "type": "A", "name": "api", "content": "1.2.3.4", "ttl": 30},
                "TTL must be 1",
            ),
            (
                {"zone": "z", "type": "TXT", "name": "api", "content": "v", "proxied": True},
                "proxied is only supported",
            ),
            (
                {"zone": "z", "type": "A", "name": "api", "content": "1.2.3.4", "priority": 10},
                "priority is only supported",
            ),
        ],
    )
    async def test_invalid_configuration(self, configuration, message):
        with pytest.raises(ComponentError, match=message):
            await CreateDNSRecord().setup(SetupContext(configuration=configuration))

    @pytest.mark.asyncio
    async def test_valid_mx_record(self):
        await CreateDNSRecord().setup(
            SetupContext(
                configuration={
                    "zone": "z",
                    "type": "mx",
                    "name": "example.com",
                    "content": "mail.example.com",
                    "priority": 10,
                }
            )
        )


class TestCreateDNSRecordExecute:
    @pytest.mark.asyncio
    async def test_creates_record(self, integration):
        """Zone names resolve through sync metadata."""
        transport = RecordingTransport([json_response(200, envelope(RECORD))])
        ctx = ExecutionContext(
            configuration={
                "zone": "example.com",
                "type": "a",
                "name": "api",
                "content": "192.0.2.1",
                "ttl": 300,
            },
            integration=integration,
            transport=transport,
        )

        await CreateDNSRecord().execute(ctx)

        assert transport.last.method == "POST"
        assert transport.last.url.path == "/client/v4/zones/zone-1/dns_records"
        assert transport.json_body() == {
            "type": "A",
            "name": "api",
            "content": "192.0.2.1",
            "ttl": 300,
            "proxied": False,
        }
        assert ctx.execution_state.channel == "default"
        assert ctx.execution_state.payload_type == "cloudflare.dnsRecord"
        assert ctx.execution_state.payloads == [RECORD]

    @pytest.mark.asyncio
    async def test_ttl_defaults_to_automatic(self, integration):
        transport = RecordingTransport([json_response(200, envelope(RECORD))])
        ctx = ExecutionContext(
            configuration={"zone": "zone-1", "type": "TXT", "name": "api", "content": "v=1"},
            integration=integration,
            transport=transport,
        )

        await CreateDNSRecord().execute(ctx)

        body = transport.json_body()
        assert body["ttl"] == 1
        assert "proxied" not in body

    @pytest.mark.asyncio
    async def test_rejected_record_goes_to_failed_channel(self, integration):
        transport = RecordingTransport(
            [
                json_response(
                    400,
                    envelope(
                        success=False,
                        errors=[{"code": 81057, "message": "Record already exists."}],
                    ),
                )
            ]
        )
        ctx = ExecutionContext(
            configuration={"zone": "zone-1", "type": "A", "name": "api", "content": "192.0.2.1"},
            integration=integration,
            transport=transport,
        )

        await CreateDNSRecord().execute(ctx)

        assert ctx.execution_state.channel == "failed"
        payload = ctx.execution_state.payloads[0]
        assert payload["error"] == "Record already exists."
        assert payload["statusCode"] == 400
        assert payload["errors"] == [{"code": 81057, "message": "Record already exists."}]

    @pytest.mark.asyncio
    async def test_auth_error_raises(self, integration):
        transport = RecordingTransport([json_response(403, envelope(success=False))])
        ctx = ExecutionContext(
            configuration={"zone": "zone-1", "type": "A", "name": "api", "content": "192.0.2.1"},
            integration=integration,
            transport=transport,
        )

        with pytest.raises(ComponentError, match="failed to create DNS record: request got 403 code"):
            await CreateDNSRecord().execute(ctx)

        assert not ctx.execution_state.emitted


# =============================================================================
# Update / Delete DNS Record Tests
# =============================================================================


class TestUpdateDNSRecord:
    @pytest.mark.asyncio
    async def test_setup_requires_record(self):
        with pytest.raises(ComponentError, match="record is required"):
            await UpdateDNSRecord().setup(SetupContext(configuration={"zone": "z", "record": " "}))

    @pytest.mark.asyncio
    async def test_empty_fields_keep_current_values(self, integration):
        """Record looked up by name, only content replaced."""
        updated = dict(RECORD, content="192.0.2.2")
        transport = RecordingTransport(
            [
                json_response(200, envelope([RECORD])),
                json_response(200, envelope(updated)),
            ]
        )
        ctx = ExecutionContext(
            configuration={"zone": "zone-1", "record": "api.example.com", "content": "192.0.2.2"},
            integration=integration,
            transport=transport,
        )

        await UpdateDNSRecord().execute(ctx)

        assert transport.last.method == "PUT"
        assert transport.last.url.path == "/client/v4/zones/zone-1/dns_records/rec-1"
        assert transport.json_body() == {
            "type": "A",
            "name": "api.example.com",
            "content": "192.0.2.2",
            "ttl": 300,
            "proxied": False,
        }
        assert ctx.execution_state.payloads[0]["content"] == "192.0.2.2"

    @pytest.mark.asyncio
    async def test_unknown_record_goes_to_failed_channel(self, integration):
        transport = RecordingTransport(
            [
                json_response(200, envelope([])),
                json_response(
                    404,
                    envelope(success=False, errors=[{"code": 81044, "message": "Record does not exist."}]),
                ),
            ]
        )
        ctx = ExecutionContext(
            configuration={"zone": "zone-1", "record": "missing"},
            integration=integration,
            transport=transport,
        )

        await UpdateDNSRecord().execute(ctx)

        assert ctx.execution_state.channel == "failed"
        assert ctx.execution_state.payloads[0]["statusCode"] == 404


class TestDeleteDNSRecord:
    @pytest.mark.asyncio
    async def test_deletes_record(self, integration):
        transport = RecordingTransport(
            [
                json_response(200, envelope([RECORD])),
                json_response(200, envelope({"id": "rec-1"})),
            ]
        )
        ctx = ExecutionContext(
            configuration={"zone": "example.com", "record": "rec-1"},
            integration=integration,
            transport=transport,
        )

        await DeleteDNSRecord().execute(ctx)

        assert transport.last.method == "DELETE"
        assert transport.last.url.path == "/client/v4/zones/zone-1/dns_records/rec-1"
        assert ctx.execution_state.payloads == [
            {"id": "rec-1", "name": "api.example.com", "zoneId": "zone-1", "deleted": True}
        ]

    @pytest.mark.asyncio
    async def test_server_error_raises(self, integration):
        transport = RecordingTransport(
            [
                json_response(200, envelope([RECORD])),
                json_response(500, envelope(success=False)),
            ]
        )
        ctx = ExecutionContext(
            configuration={"zone": "zone-1", "record": "rec-1"},
            integration=integration,
            transport=transport,
        )

        with pytest.raises(ComponentError, match="failed to delete DNS record"):
            await DeleteDNSRecord().execute(ctx)


# =============================================================================
# Update Redirect Rule Tests
# =============================================================================


def ruleset(rule):
    return envelope(
        {
            "id": "ruleset-1",
            "name": "default",
            "kind": "zone",
            "phase": "http_request_dynamic_redirect",
            "rules": [rule],
        }
    )


class TestUpdateRedirectRuleSetup:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "configuration,message",
        [
            ({"ruleId": "r", "matchType": "wildcard"}, "zone is required"),
            ({"zone": "z", "matchType": "wildcard"}, "ruleId is required"),
            ({"zone": "z", "ruleId": "r"}, "matchType is required"),
            ({"zone": "z", "ruleId": "r", "matchType": "regex"}, "invalid matchType: regex"),
            (
                {"zone": "z", "ruleId": "r", "matchType": "wildcard", "targetUrl": "https://x"},
                "sourceUrlPattern is required",
            ),
            (
                {"zone": "z", "ruleId": "r", "matchType": "expression", "targetUrl": "https://x"},
                "expression is required",
            ),
            (
                {"zone": "z", "ruleId": "r", "matchType": "expression", "expression": "true"},
                "targetUrl is required",
            ),
            (
                {
                    "zone": "z",
                    "ruleId": "r",
                    "matchType": "expression",
                    "expression": "true",
                    "targetUrl": "https://x",
                    "statusCode": "404",
                },
                "status code must be one of",
            ),
        ],
    )
    async def test_invalid_configuration(self, configuration, message):
        with pytest.raises(ComponentError, match=message):
            await UpdateRedirectRule().setup(SetupContext(configuration=configuration))


class TestUpdateRedirectRuleExecute:
    @pytest.mark.asyncio
    async def test_wildcard_with_captures(self, integration):
        """Targets referencing ${n} become wildcard_replace expressions."""
        updated_rule = {
            "id": "rule-1",
            "action": "redirect",
            "expression": '(http.request.full_uri wildcard r"https://old.example.com/*")',
            "enabled": True,
            "action_parameters": {"from_value": {"status_code": 302}},
        }
        transport = RecordingTransport(
            [
                json_response(200, ruleset({"id": "rule-1", "action": "redirect", "expression": "true"})),
                json_response(200, ruleset(updated_rule)),
            ]
        )
        ctx = ExecutionContext(
            configuration={
                "zone": "zone-1",
                "ruleId": "rule-1",
                "matchType": "wildcard",
                "sourceUrlPattern": "https://old.example.com/*",
                "targetUrl": "https://new.example.com/${1}",
                "statusCode": "302",
                "preserveQueryString": True,
            },
            integration=integration,
            transport=transport,
        )

        await UpdateRedirectRule().execute(ctx)

        first, second = transport.requests
        assert first.url.path == "/client/v4/zones/zone-1/rulesets/phases/http_request_dynamic_redirect/entrypoint"
        assert second.method == "PATCH"
        assert second.url.path == "/client/v4/zones/zone-1/rulesets/ruleset-1/rules/rule-1"

        body = transport.json_body()
        assert body["action"] == "redirect"
        assert body["enabled"] is True
        assert body["expression"] == '(http.request.full_uri wildcard r"https://old.example.com/*")'
        from_value = body["action_parameters"]["from_value"]
        assert from_value["status_code"] == 302
        assert from_value["preserve_query_string"] is True
        assert from_value["target_url"] == {
            "expression": (
                'wildcard_replace(http.request.full_uri, r"https://old.example.com/*", '
                'r"https://new.example.com/${1}")'
            )
        }

        payload = ctx.execution_state.payloads[0]
        assert ctx.execution_state.payload_type == "cloudflare.redirectRule"
        assert payload["zoneId"] == "zone-1"
        assert payload["ruleId"] == "rule-1"
        assert payload["rule"]["id"] == "rule-1"

    @pytest.mark.asyncio
    async def test_expression_match(self, integration):
        rule = {"id": "rule-1", "action": "redirect", "expression": "true", "enabled": False}
        transport = RecordingTransport(
            [json_response(200, ruleset(rule)), json_response(200, ruleset(rule))]
        )
        ctx = ExecutionContext(
            configuration={
                "zone": "zone-1",
                "ruleId": "rule-1",
                "matchType": "expression",
                "expression": 'http.host eq "old.example.com"',
                "targetUrl": "https://new.example.com",
                "enabled": False,
            },
            integration=integration,
            transport=transport,
        )

        await UpdateRedirectRule().execute(ctx)

        body = transport.json_body()
        assert body["expression"] == 'http.host eq "old.example.com"'
        from_value = body["action_parameters"]["from_value"]
        assert from_value["status_code"] == 301
        assert from_value["target_url"] == {"value": "https://new.example.com"}
        assert "preserve_query_string" not in from_value
        assert "description" not in body

    @pytest.mark.asyncio
    async def test_ruleset_lookup_failure(self, integration):
        transport = RecordingTransport([json_response(404, envelope(success=False))])
        ctx = ExecutionContext(
            configuration={
                "zone": "zone-1",
                "ruleId": "rule-1",
                "matchType": "expression",
                "expression": "true",
                "targetUrl": "https://new.example.com",
            },
            integration=integration,
            transport=transport,
        )

        with pytest.raises(ComponentError, match="error getting ruleset"):
            await UpdateRedirectRule().execute(ctx)
