"""
Pytest configuration and fixtures for superplane_integrations tests.
"""

import json
import sys
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

# Add the repository root to path for imports
# This allows `from superplane_integrations.core import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from superplane_integrations.config import get_settings  # noqa: E402


class RecordingTransport(httpx.MockTransport):
    """
    MockTransport that answers from a queue of responses and keeps every
    request it saw.

    Each queued item is either an httpx.Response or an exception instance
    to raise (e.g. httpx.ConnectError). Running out of responses raises
    httpx.ConnectError, which clients report as a network failure.
    """

    def __init__(self, responses: list | None = None):
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise httpx.ConnectError("no more responses", request=request)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def json_body(self, index: int = -1):
        return json.loads(self.requests[index].content)


def json_response(status_code: int, body) -> httpx.Response:
    """Build a JSON response; strings are sent verbatim."""
    if isinstance(body, str):
        return httpx.Response(
            status_code,
            content=body.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
    return httpx.Response(status_code, json=body)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests must not leak environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    """Factory for a RecordingTransport with queued responses."""

    def _make(*responses) -> RecordingTransport:
        return RecordingTransport(list(responses))

    return _make
