"""
Base classes for SuperPlane integration clients.

Every third-party binding in this package (AWS ECS, Cloudflare, Dash0,
Daytona, New Relic, Grafana) talks HTTP through an IntegrationClient
subclass. The base class owns:

1. The httpx.AsyncClient lifecycle (lazy creation, close, async context)
2. Authentication header injection via _get_auth_headers()
3. Mapping of non-2xx responses onto the IntegrationError hierarchy
4. Optional retry with exponential backoff for retryable failures

Retry Strategy:
    - Retryable errors: timeouts, network errors, 429, 5xx
    - Non-retryable: every other 4xx, auth errors
    - max_retries defaults to 0: one request per operation unless the
      host opts in through settings
"""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class IntegrationError(Exception):
    """Base exception for failures talking to a third-party API."""

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.integration = integration
        self.status_code = status_code
        self.response_body = response_body
        self.retryable = retryable

    @property
    def message(self) -> str:
        return self.args[0]

    def __str__(self) -> str:
        parts = [f"[{self.integration}] {self.message}"]
        if self.status_code:
            parts.append(f"(status={self.status_code})")
        return " ".join(parts)


class AuthenticationError(IntegrationError):
    """Raised on 401/403 responses."""

    def __init__(self, message: str, integration: str, **kwargs):
        super().__init__(message, integration, retryable=False, **kwargs)


class RateLimitError(IntegrationError):
    """Raised on 429 responses."""

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        retry_after: float | None = None,
        **kwargs,
    ):
        super().__init__(message, integration, retryable=True, **kwargs)
        self.retry_after = retry_after


class NotFoundError(IntegrationError):
    """Raised on 404 responses."""

    def __init__(self, message: str, integration: str, **kwargs):
        super().__init__(message, integration, retryable=False, **kwargs)


class ValidationError(IntegrationError):
    """Raised on 400/422 responses."""

    def __init__(self, message: str, integration: str, **kwargs):
        super().__init__(message, integration, retryable=False, **kwargs)


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class IntegrationConfig:
    """Connection settings shared by all integration clients."""

    base_url: str = ""
    timeout: float = 30.0

    max_retries: int = 0
    retry_delay: float = 1.0

    log_requests: bool = False
    log_responses: bool = False


# =============================================================================
# Base Client
# =============================================================================


class IntegrationClient(ABC):
    """
    Abstract base class for integration clients.

    Subclasses must implement:
    - name: integration identifier used in logs and errors
    - _get_auth_headers(): headers attached to every request

    Subclasses may override _raise_for_status() when the vendor wraps
    errors in a structured envelope.

    The optional ``transport`` is handed to httpx unchanged. Hosts use it
    for proxies and tests use httpx.MockTransport.
    """

    def __init__(
        self,
        config: IntegrationConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this integration."""
        ...

    @abstractmethod
    def _get_auth_headers(self) -> dict[str, str]:
        """Return authentication headers for requests."""
        ...

    def _get_default_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
                headers={
                    **self._get_default_headers(),
                    **self._get_auth_headers(),
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        max_body_size: int | None = None,
    ) -> httpx.Response:
        """
        Make an HTTP request, retrying retryable failures.

        Args:
            method: HTTP method
            path: Path relative to base_url, or an absolute URL
            params: Query parameters
            json: JSON body
            data: Form body (application/x-www-form-urlencoded)
            content: Raw body bytes
            headers: Per-request headers, merged over the client defaults
            max_body_size: Stop reading the body after this many bytes; the
                returned response holds at most max_body_size bytes

        Raises:
            IntegrationError: On any non-retryable error or after max retries
        """
        attempt = 0
        while True:
            try:
                return await self._do_request(
                    method,
                    path,
                    params=params,
                    json=json,
                    data=data,
                    content=content,
                    headers=headers,
                    max_body_size=max_body_size,
                )
            except IntegrationError as e:
                if not e.retryable:
                    raise

                if attempt >= self.config.max_retries:
                    if self.config.max_retries:
                        logger.warning(
                            f"[{self.name}] Max retries ({self.config.max_retries}) "
                            f"reached for {method} {path}"
                        )
                    raise

                backoff = self._calculate_backoff(attempt, e)
                attempt += 1
                logger.info(
                    f"[{self.name}] Retry {attempt}/{self.config.max_retries} "
                    f"for {method} {path} after {backoff:.2f}s"
                )
                await asyncio.sleep(backoff)

    def _calculate_backoff(self, attempt: int, error: IntegrationError) -> float:
        """Exponential delay with +/-25% jitter, capped at 60 seconds."""
        if isinstance(error, RateLimitError) and error.retry_after:
            return error.retry_after

        base_delay = self.config.retry_delay * (2**attempt)
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return min(base_delay + jitter, 60.0)

    async def _do_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        max_body_size: int | None = None,
    ) -> httpx.Response:
        """Execute a single HTTP request (no retry)."""
        client = await self._get_client()

        if self.config.log_requests:
            logger.debug(f"[{self.name}] {method} {path} params={params} body={json or data}")

        request = client.build_request(
            method,
            path,
            params=params,
            json=json,
            data=data,
            content=content,
            headers=headers,
        )
        try:
            if max_body_size is None:
                response = await client.send(request)
            else:
                response = await self._send_limited(client, request, max_body_size)
        except httpx.TimeoutException as e:
            raise IntegrationError(
                f"Request timeout: {e}",
                self.name,
                retryable=True,
            ) from e
        except httpx.NetworkError as e:
            raise IntegrationError(
                f"Network error: {e}",
                self.name,
                retryable=True,
            ) from e

        if self.config.log_responses:
            logger.debug(
                f"[{self.name}] Response: status={response.status_code} "
                f"body={response.text[:500] if response.text else 'empty'}"
            )

        if not response.is_success:
            self._raise_for_status(response)

        return response

    async def _send_limited(
        self,
        client: httpx.AsyncClient,
        request: httpx.Request,
        limit: int,
    ) -> httpx.Response:
        """Stream the body and keep at most limit bytes of it."""
        streamed = await client.send(request, stream=True)
        chunks: list[bytes] = []
        size = 0
        try:
            async for chunk in streamed.aiter_bytes():
                chunks.append(chunk)
                size += len(chunk)
                if size >= limit:
                    break
        finally:
            await streamed.aclose()

        # The body is already decoded, so encoding and length headers no longer apply.
        headers = httpx.Headers(streamed.headers)
        for name in ("Content-Encoding", "Content-Length", "Transfer-Encoding"):
            headers.pop(name, None)
        return httpx.Response(
            streamed.status_code,
            headers=headers,
            content=b"".join(chunks)[:limit],
            request=request,
        )

    def _error_detail(self, response: httpx.Response) -> str:
        """Text used in error messages for a failed response."""
        return response.text

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        Translate a non-2xx response into an IntegrationError subtype.

        Raises:
            AuthenticationError: For 401/403
            RateLimitError: For 429
            NotFoundError: For 404
            ValidationError: For 400/422
            IntegrationError: For anything else (retryable when 5xx)
        """
        status = response.status_code
        body = response.text
        detail = self._error_detail(response)

        if status in (401, 403):
            raise AuthenticationError(
                f"Authentication failed: {detail}",
                self.name,
                status_code=status,
                response_body=body,
            )

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                "Rate limit exceeded",
                self.name,
                status_code=status,
                response_body=body,
                retry_after=float(retry_after) if retry_after else None,
            )

        if status == 404:
            raise NotFoundError(
                f"Resource not found: {detail}",
                self.name,
                status_code=status,
                response_body=body,
            )

        if status in (400, 422):
            raise ValidationError(
                f"Validation error: {detail}",
                self.name,
                status_code=status,
                response_body=body,
            )

        raise IntegrationError(
            f"Request failed: {detail}",
            self.name,
            status_code=status,
            response_body=body,
            retryable=status >= 500,
        )

    async def __aenter__(self) -> "IntegrationClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
