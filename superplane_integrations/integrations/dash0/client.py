"""
Dash0 API Client.

Talks to three Dash0 surfaces from one API token:
- the Prometheus-compatible query API under {base}/api/prometheus
- the alerting and synthetic-check configuration API under {base}/api
- the OTLP/HTTP logs ingest endpoint on the "ingress." host

Usage:
    config = Dash0Config(
        api_token="auth_...",
        base_url="https://api.us-west-2.aws.dash0.com",
    )
    async with Dash0Client(config) as client:
        rules = await client.list_check_rules()
        result = await client.query_instant("up", config.dataset)

API Reference:
    https://api-docs.dash0.com/
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlsplit, urlunsplit

import httpx
import pydantic

from superplane_integrations.integrations.base import (
    IntegrationClient,
    IntegrationConfig,
    IntegrationError,
)
from superplane_integrations.integrations.dash0.schemas import (
    CheckRule,
    PrometheusResponse,
    SyntheticCheck,
)

logger = logging.getLogger(__name__)

MAX_RESPONSE_SIZE = 1 * 1024 * 1024
DEFAULT_DATASET = "default"
PROMETHEUS_PATH_SUFFIX = "/api/prometheus"

BASE_URL_REQUIRED_MESSAGE = (
    "baseURL is required for Dash0 Cloud. Find your API URL in Dash0 dashboard "
    "under Organization Settings > Endpoints Reference"
)


# =============================================================================
# Errors
# =============================================================================


class Dash0RequestError(IntegrationError):
    """A non-2xx answer from Dash0, tagged with the client operation."""

    def __init__(self, status_code: int, body: str, operation: str = ""):
        super().__init__(
            f"request got {status_code} code: {body}",
            "dash0",
            status_code=status_code,
            response_body=body,
            retryable=status_code == 429 or status_code >= 500,
        )
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


# =============================================================================
# Configuration
# =============================================================================


def normalize_base_url(value: str) -> str:
    """Strip the trailing slash and a pasted Prometheus path suffix."""
    base_url = value.strip().removesuffix("/")
    return base_url.removesuffix(PROMETHEUS_PATH_SUFFIX)


def derive_logs_ingest_url(base_url: str) -> str:
    """
    Map the API host onto the OTLP ingest host.

    https://api.eu-west-1.aws.dash0.com/x -> https://ingress.eu-west-1.aws.dash0.com
    Hosts not starting with "api." are kept; the port is preserved and the
    path and query dropped.
    """
    parts = urlsplit(base_url)
    if not parts.scheme or not parts.hostname:
        return base_url.removesuffix("/")

    hostname = parts.hostname
    if hostname.startswith("api."):
        hostname = "ingress." + hostname.removeprefix("api.")

    netloc = f"{hostname}:{parts.port}" if parts.port else hostname
    return urlunsplit((parts.scheme, netloc, "", "", ""))


@dataclass(frozen=True, slots=True)
class Dash0Config(IntegrationConfig):
    """Configuration for Dash0 client."""

    api_token: str = ""
    dataset: str = DEFAULT_DATASET

    def __post_init__(self):
        if not self.api_token:
            raise ValueError("Dash0 API token is required")

        base_url = normalize_base_url(self.base_url)
        if not base_url:
            raise ValueError(BASE_URL_REQUIRED_MESSAGE)
        object.__setattr__(self, "base_url", base_url)
        object.__setattr__(self, "dataset", self.dataset.strip() or DEFAULT_DATASET)

    @property
    def logs_ingest_url(self) -> str:
        return derive_logs_ingest_url(self.base_url)


# =============================================================================
# Response parsing
# =============================================================================


def parse_json_response(body: bytes) -> dict[str, Any]:
    """
    Decode a configuration API response into a dict.

    An empty body becomes {} and a top-level array becomes {"items": [...]}.

    Raises:
        ValueError: For any other payload shape
    """
    text = body.decode("utf-8", errors="replace").strip()
    if not text:
        return {}

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError("unexpected response payload shape") from e

    if isinstance(parsed, dict):
        return parsed
    if isinstance(parsed, list):
        return {"items": parsed}
    raise ValueError("unexpected response payload shape")


def _first_non_empty_string(item: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _parse_listing(body: bytes, id_keys: tuple[str, ...]) -> list[dict[str, str]]:
    """
    Extract {id, origin, name} entries from any supported list shape.

    Raises:
        ValueError: If the body is not JSON or not a supported shape
    """
    parsed = json.loads(body or b"null")
    if parsed is None:
        return []

    if isinstance(parsed, list) and all(isinstance(entry, str) for entry in parsed):
        return [
            {"id": entry.strip(), "origin": entry.strip(), "name": entry.strip()}
            for entry in parsed
            if entry.strip()
        ]

    if isinstance(parsed, dict):
        items = parsed.get("items")
        if not isinstance(items, list):
            items = parsed.get("data") if isinstance(parsed.get("data"), list) else []
    elif isinstance(parsed, list):
        items = parsed
    else:
        raise ValueError(f"unexpected list payload: {type(parsed).__name__}")

    entries = []
    for item in items:
        if not isinstance(item, dict):
            continue
        entry_id = _first_non_empty_string(item, *id_keys)
        origin = _first_non_empty_string(item, "origin")
        if not entry_id and not origin:
            continue
        entries.append(
            {
                "id": entry_id or origin,
                "origin": origin or entry_id,
                "name": _first_non_empty_string(item, "name", "label", "title")
                or entry_id
                or origin,
            }
        )
    return entries


def parse_check_rules(body: bytes) -> list[CheckRule]:
    entries = _parse_listing(body, ("id", "checkRuleId", "ruleId"))
    return [CheckRule.model_validate(entry) for entry in entries]


def parse_synthetic_checks(body: bytes) -> list[SyntheticCheck]:
    entries = _parse_listing(body, ("id", "syntheticCheckId"))
    return [SyntheticCheck.model_validate(entry) for entry in entries]


# =============================================================================
# Client
# =============================================================================


class Dash0Client(IntegrationClient):
    """
    Async client for Dash0 (Bearer token auth).

    Every configuration API call carries the ?dataset= query parameter.
    Response bodies are capped at MAX_RESPONSE_SIZE bytes.
    """

    def __init__(
        self,
        config: Dash0Config,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config, transport=transport)
        self._config: Dash0Config = config

    @property
    def name(self) -> str:
        return "dash0"

    @property
    def dataset(self) -> str:
        return self._config.dataset

    def _get_auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.api_token}"}

    def _get_default_headers(self) -> dict[str, str]:
        # Content-Type is set per request: the query API takes form bodies.
        return {"Accept": "application/json"}

    def _raise_for_status(self, response: httpx.Response) -> None:
        raise Dash0RequestError(response.status_code, response.text)

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
    ) -> bytes:
        """Run one request and return the raw body, tagging errors with operation."""
        headers = None
        if data is not None:
            headers = {"Content-Type": "application/x-www-form-urlencoded"}

        try:
            response = await self._request(
                method,
                path,
                params=params,
                json=json,
                data=data,
                headers=headers,
                max_body_size=MAX_RESPONSE_SIZE,
            )
        except Dash0RequestError as e:
            e.operation = operation
            raise

        if len(response.content) >= MAX_RESPONSE_SIZE:
            raise IntegrationError(
                f"{operation}: response too large: exceeds maximum size of "
                f"{MAX_RESPONSE_SIZE} bytes",
                self.name,
            )
        return response.content

    def _dataset_params(self) -> dict[str, str]:
        return {"dataset": self.dataset}

    def _parse(self, operation: str, body: bytes) -> dict[str, Any]:
        try:
            return parse_json_response(body)
        except ValueError as e:
            raise IntegrationError(f"{operation}: parse response: {e}", self.name) from e

    # =========================================================================
    # Prometheus
    # =========================================================================

    async def _prometheus(
        self,
        operation: str,
        endpoint: str,
        form: dict[str, str],
    ) -> dict[str, Any]:
        body = await self._call(
            operation,
            "POST",
            f"{PROMETHEUS_PATH_SUFFIX}/api/v1/{endpoint}",
            data=form,
        )
        try:
            response = PrometheusResponse.model_validate_json(body)
        except pydantic.ValidationError as e:
            raise IntegrationError(f"{operation}: parse response: {e}", self.name) from e

        if response.status != "success":
            raise IntegrationError(
                f"{operation}: prometheus query returned non-success status: {response.status}",
                self.name,
            )
        return {"status": response.status, "data": response.data}

    async def query_instant(self, query: str, dataset: str) -> dict[str, Any]:
        """Run an instant PromQL query; returns {"status", "data"}."""
        logger.info(f"[dash0] Prometheus instant query on dataset {dataset}")
        return await self._prometheus(
            "dash0 client: execute prometheus instant query",
            "query",
            {"dataset": dataset, "query": query},
        )

    async def query_range(
        self,
        query: str,
        dataset: str,
        start: str,
        end: str,
        step: str,
    ) -> dict[str, Any]:
        """Run a range PromQL query; returns {"status", "data"}."""
        logger.info(f"[dash0] Prometheus range query on dataset {dataset}")
        return await self._prometheus(
            "dash0 client: execute prometheus range query",
            "query_range",
            {"dataset": dataset, "query": query, "start": start, "end": end, "step": step},
        )

    # =========================================================================
    # Alerting / Synthetic checks
    # =========================================================================

    async def list_check_rules(self) -> list[CheckRule]:
        operation = "dash0 client: list check rules"
        body = await self._call(
            operation, "GET", "/api/alerting/check-rules", params=self._dataset_params()
        )
        try:
            return parse_check_rules(body)
        except ValueError as e:
            raise IntegrationError(
                f"{operation}: parse check rules response: {e}", self.name
            ) from e

    async def list_synthetic_checks(self) -> list[SyntheticCheck]:
        operation = "dash0 client: list synthetic checks"
        body = await self._call(
            operation, "GET", "/api/synthetic-checks", params=self._dataset_params()
        )
        try:
            return parse_synthetic_checks(body)
        except ValueError as e:
            raise IntegrationError(
                f"{operation}: parse synthetic checks response: {e}", self.name
            ) from e

    async def get_check_details(
        self,
        check_id: str,
        include_history: bool = False,
    ) -> dict[str, Any]:
        """
        Fetch a failed check, falling back to the check rule on 404.

        The result always carries "checkId".
        """
        operation = "dash0 client: get check details"
        check_id = check_id.strip()
        if not check_id:
            raise IntegrationError(f"{operation}: check id is required", self.name)

        params = self._dataset_params()
        if include_history:
            params["include_history"] = "true"
        escaped = quote(check_id, safe="")

        try:
            body = await self._call(
                operation, "GET", f"/api/alerting/failed-checks/{escaped}", params=params
            )
        except Dash0RequestError as e:
            if e.status_code != 404:
                raise
            logger.info(f"[dash0] Failed check {check_id} not found, trying check rules")
            try:
                body = await self._call(
                    operation, "GET", f"/api/alerting/check-rules/{escaped}", params=params
                )
            except IntegrationError as fallback_error:
                raise IntegrationError(
                    f"{operation}: fallback check-rules lookup failed: {fallback_error}",
                    self.name,
                    status_code=fallback_error.status_code,
                ) from fallback_error

        parsed = self._parse(operation, body)
        parsed.setdefault("checkId", check_id)
        return parsed

    async def _upsert(
        self,
        operation: str,
        collection: str,
        origin_or_id: str,
        specification: dict[str, Any],
    ) -> dict[str, Any]:
        origin_or_id = origin_or_id.strip()
        if not origin_or_id:
            raise IntegrationError(f"{operation}: origin/id is required", self.name)

        body = await self._call(
            operation,
            "PUT",
            f"{collection}/{quote(origin_or_id, safe='')}",
            params=self._dataset_params(),
            json=specification,
        )
        parsed = self._parse(operation, body)
        parsed.setdefault("originOrId", origin_or_id)
        return parsed

    async def upsert_synthetic_check(
        self,
        origin_or_id: str,
        specification: dict[str, Any],
    ) -> dict[str, Any]:
        logger.info(f"[dash0] Upserting synthetic check {origin_or_id}")
        return await self._upsert(
            "dash0 client: upsert synthetic check",
            "/api/synthetic-checks",
            origin_or_id,
            specification,
        )

    async def upsert_check_rule(
        self,
        origin_or_id: str,
        specification: dict[str, Any],
    ) -> dict[str, Any]:
        logger.info(f"[dash0] Upserting check rule {origin_or_id}")
        return await self._upsert(
            "dash0 client: upsert check rule",
            "/api/alerting/check-rules",
            origin_or_id,
            specification,
        )

    # =========================================================================
    # Logs
    # =========================================================================

    async def send_log_events(self, request: dict[str, Any]) -> dict[str, Any]:
        """POST an OTLP/JSON logs request to the ingest endpoint."""
        operation = "dash0 client: send log events"
        body = await self._call(
            operation,
            "POST",
            f"{self._config.logs_ingest_url}/v1/logs",
            json=request,
        )
        return self._parse(operation, body)
