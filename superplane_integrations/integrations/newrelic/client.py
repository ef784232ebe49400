"""
New Relic API Client.

Two endpoints are involved, both selected by the account's site (US/EU):

1. NerdGraph (GraphQL) for key validation, account listing and NRQL
2. The Metric API for reporting dimensional metrics

NerdGraph only accepts user keys in the Api-Key header. The Metric API
accepts user keys (NRAK-...) in Api-Key and ingest license keys in
X-License-Key, so the auth header is chosen per request.

Usage:
    async with NewRelicClient(NewRelicConfig(api_key="NRAK-...", site="EU")) as client:
        accounts = await client.list_accounts()
        response = await client.run_nrql(accounts[0].id, "SELECT count(*) FROM Transaction")

API Reference:
    https://docs.newrelic.com/docs/apis/nerdgraph/
    https://docs.newrelic.com/docs/data-apis/ingest-apis/metric-api/
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx
import pydantic

from superplane_integrations.integrations.base import (
    IntegrationClient,
    IntegrationConfig,
    IntegrationError,
)
from superplane_integrations.integrations.newrelic.schemas import (
    Account,
    GraphQLResponse,
    MetricBatch,
    NRQLQueryResponse,
)

logger = logging.getLogger(__name__)

SITE_US = "US"
SITE_EU = "EU"

NERDGRAPH_URL_US = "https://api.newrelic.com/graphql"
NERDGRAPH_URL_EU = "https://api.eu.newrelic.com/graphql"
METRIC_API_URL_US = "https://metric-api.newrelic.com/metric/v1"
METRIC_API_URL_EU = "https://metric-api.eu.newrelic.com/metric/v1"

USER_KEY_PREFIX = "NRAK-"

DEFAULT_NRQL_TIMEOUT = 10

IDENTITY_QUERY = "{ actor { user { name email } } }"
ACCOUNTS_QUERY = "{ actor { accounts { id name } } }"


def is_user_key(api_key: str) -> bool:
    return api_key.startswith(USER_KEY_PREFIX)


def build_nrql_query(account_id: int, query: str, timeout: int) -> str:
    # json.dumps gives a GraphQL-compatible double-quoted string literal
    return (
        f"{{ actor {{ account(id: {account_id}) {{ "
        f"nrql(query: {json.dumps(query)}, timeout: {timeout}) {{ "
        "results totalResult "
        "metadata { eventTypes facets messages timeWindow { begin end } } "
        "} } } }"
    )


@dataclass(frozen=True, slots=True)
class NewRelicConfig(IntegrationConfig):
    """Configuration for New Relic client."""

    api_key: str = ""
    site: str = SITE_US

    def __post_init__(self):
        if not self.api_key:
            raise ValueError("API key is required")
        site = (self.site or SITE_US).strip().upper()
        if site not in (SITE_US, SITE_EU):
            raise ValueError(f"invalid site: {self.site} (expected US or EU)")
        object.__setattr__(self, "site", site)

    @property
    def nerdgraph_url(self) -> str:
        return NERDGRAPH_URL_EU if self.site == SITE_EU else NERDGRAPH_URL_US

    @property
    def metric_api_url(self) -> str:
        return METRIC_API_URL_EU if self.site == SITE_EU else METRIC_API_URL_US


class NewRelicClient(IntegrationClient):
    """Async client for NerdGraph and the Metric API."""

    def __init__(
        self,
        config: NewRelicConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config, transport=transport)
        self._config: NewRelicConfig = config

    @property
    def name(self) -> str:
        return "newrelic"

    @property
    def uses_user_key(self) -> bool:
        return is_user_key(self._config.api_key)

    @property
    def nerdgraph_url(self) -> str:
        return self._config.nerdgraph_url

    @property
    def metric_api_url(self) -> str:
        return self._config.metric_api_url

    def _get_auth_headers(self) -> dict[str, str]:
        # Chosen per request, see _nerdgraph_headers and _metric_headers
        return {}

    def _nerdgraph_headers(self) -> dict[str, str]:
        return {"Api-Key": self._config.api_key}

    def _metric_headers(self) -> dict[str, str]:
        if is_user_key(self._config.api_key):
            return {"Api-Key": self._config.api_key}
        return {"X-License-Key": self._config.api_key}

    def _error_detail(self, response: httpx.Response) -> str:
        """New Relic errors look like {"error": {"title": ..., "message": ...}}."""
        try:
            payload = response.json()
        except ValueError:
            return response.text

        error = payload.get("error") if isinstance(payload, dict) else None
        if not isinstance(error, dict):
            return response.text

        title = str(error.get("title") or "")
        message = str(error.get("message") or "")
        if title and message:
            return f"{title}: {message}"
        return title or message or response.text

    # =========================================================================
    # NerdGraph
    # =========================================================================

    async def _graphql(self, query: str) -> GraphQLResponse:
        response = await self._request(
            "POST",
            self.nerdgraph_url,
            json={"query": query},
            headers=self._nerdgraph_headers(),
        )

        try:
            result = GraphQLResponse.model_validate_json(response.content)
        except pydantic.ValidationError as e:
            raise IntegrationError(f"failed to decode GraphQL response: {e}", self.name) from e

        if result.errors:
            messages = "; ".join(error.message for error in result.errors)
            raise IntegrationError(f"GraphQL errors: {messages}", self.name)

        return result

    @staticmethod
    def _actor(result: GraphQLResponse, integration: str) -> dict[str, Any]:
        actor = (result.data or {}).get("actor")
        if not isinstance(actor, dict):
            raise IntegrationError("invalid GraphQL response: missing actor", integration)
        return actor

    async def validate_api_key(self) -> None:
        """Run the identity query; any answer with a data field is accepted."""
        result = await self._graphql(IDENTITY_QUERY)
        if result.data is None:
            raise IntegrationError("no data returned from identity query", self.name)

    async def list_accounts(self) -> list[Account]:
        result = await self._graphql(ACCOUNTS_QUERY)
        actor = self._actor(result, self.name)
        try:
            return [Account.model_validate(item) for item in actor.get("accounts") or []]
        except pydantic.ValidationError as e:
            raise IntegrationError(f"failed to decode accounts: {e}", self.name) from e

    async def run_nrql(
        self,
        account_id: int,
        query: str,
        timeout: int = DEFAULT_NRQL_TIMEOUT,
    ) -> NRQLQueryResponse:
        logger.info(f"[newrelic] Running NRQL query on account {account_id}")
        result = await self._graphql(build_nrql_query(account_id, query, timeout))

        actor = self._actor(result, self.name)
        account = actor.get("account")
        if not isinstance(account, dict):
            raise IntegrationError("invalid GraphQL response: missing account", self.name)

        nrql = account.get("nrql")
        if not isinstance(nrql, dict):
            raise IntegrationError("invalid GraphQL response: missing nrql", self.name)

        try:
            return NRQLQueryResponse.model_validate(nrql)
        except pydantic.ValidationError as e:
            raise IntegrationError(f"failed to decode NRQL response: {e}", self.name) from e

    # =========================================================================
    # Metric API
    # =========================================================================

    async def report_metric(self, batches: list[MetricBatch]) -> None:
        """POST a JSON array of metric batches."""
        count = sum(len(batch.metrics) for batch in batches)
        logger.info(f"[newrelic] Reporting {count} metric(s) to {self._config.site}")
        await self._request(
            "POST",
            self.metric_api_url,
            json=[batch.to_api_dict() for batch in batches],
            headers=self._metric_headers(),
        )
