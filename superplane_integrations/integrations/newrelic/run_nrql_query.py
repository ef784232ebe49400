"""
Run NRQL Query component.

Runs an NRQL query through NerdGraph against one account. The account
comes from the dropdown (integration metadata), a manual id that wins
over the dropdown, or at execution time from the upstream payload.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import field_validator

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.newrelic.client import DEFAULT_NRQL_TIMEOUT
from superplane_integrations.integrations.newrelic.common import (
    extract_resource_id,
    extract_string_from_data,
    is_unresolved_template,
    new_client,
)
from superplane_integrations.utils import embed_json

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "newrelic.nrqlQuery"
MAX_TIMEOUT = 120


class RunNRQLQueryConfig(ComponentConfig):
    account: str = ""
    manual_account_id: str = ""
    query: str = ""
    timeout: int = 0

    @field_validator("account", "manual_account_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return extract_resource_id(value)

    @property
    def account_id(self) -> str:
        return self.manual_account_id or self.account


class RunNRQLQuery(Component):
    @property
    def name(self) -> str:
        return "newrelic.runNRQLQuery"

    @property
    def label(self) -> str:
        return "Run NRQL Query"

    @property
    def description(self) -> str:
        return "Execute NRQL queries to retrieve data from New Relic"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(RunNRQLQueryConfig, ctx.configuration)

        account_id = config.account_id
        if not account_id:
            raise ComponentError(
                "account is required (select from dropdown or use Manual Account ID)"
            )
        if is_unresolved_template(account_id):
            raise ComponentError(
                f"account ID contains unresolved template variable: {account_id}; "
                "configure the upstream trigger first"
            )
        if not config.query:
            raise ComponentError("query is required")
        if is_unresolved_template(config.query):
            raise ComponentError(
                f"query contains unresolved template variable: {config.query}; "
                "configure the upstream trigger first"
            )
        if config.timeout < 0 or config.timeout > MAX_TIMEOUT:
            raise ComponentError(f"timeout must be between 0 and {MAX_TIMEOUT} seconds")

        try:
            client = new_client(ctx.integration, ctx.transport)
        except ComponentError as e:
            raise ComponentError(f"failed to create client: {e}") from e

        async with client:
            try:
                accounts = await client.list_accounts()
            except IntegrationError as e:
                raise ComponentError(f"failed to list accounts: {e}") from e

        verified = next((a for a in accounts if str(a.id) == account_id.strip()), None)
        if verified is None:
            raise ComponentError(
                f"account ID {account_id} not found or not accessible with the provided API key"
            )

        ctx.metadata.update({"account": verified.model_dump(), "manual": True})

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(RunNRQLQueryConfig, ctx.configuration)

        try:
            client = new_client(ctx.integration, ctx.transport)
        except ComponentError as e:
            raise ComponentError(f"failed to create client: {e}") from e

        account_id = config.account_id or extract_string_from_data(
            ctx.data, "accountId", "account_id", "account"
        )
        query = config.query or extract_string_from_data(ctx.data, "query", "nrqlQuery")

        if is_unresolved_template(account_id):
            raise ComponentError(
                f"account ID contains unresolved template variable: {account_id}; "
                "ensure the upstream trigger is configured and variables are mapped"
            )
        if is_unresolved_template(query):
            raise ComponentError(
                f"query contains unresolved template variable: {query}; "
                "ensure the upstream trigger is configured and variables are mapped"
            )
        if not account_id:
            raise ComponentError(
                "account ID is missing: set it in configuration "
                "or connect an upstream trigger that provides it"
            )
        if not query:
            raise ComponentError(
                "NRQL query is missing: set it in configuration "
                "or connect an upstream trigger that provides it"
            )

        try:
            numeric_id = int(account_id.strip())
        except ValueError:
            raise ComponentError(
                f"invalid account ID '{account_id}': must be a numeric string (e.g. '1234567')"
            ) from None

        timeout = config.timeout or DEFAULT_NRQL_TIMEOUT

        async with client:
            try:
                response = await client.run_nrql(numeric_id, query, timeout)
            except IntegrationError as e:
                raise ComponentError(f"failed to execute NRQL query: {e}") from e

        payload = {
            "results": response.results,
            "totalResult": response.total_result,
            "metadata": embed_json(response.metadata) if response.metadata else None,
            "query": query,
            "accountId": account_id,
        }
        logger.info(f"[newrelic] NRQL query returned {len(response.results)} result(s)")
        ctx.execution_state.emit(
            DEFAULT_OUTPUT_CHANNEL.name,
            PAYLOAD_TYPE,
            [{key: value for key, value in payload.items() if value is not None}],
        )
