"""Pytest configuration and shared fixtures.

The Cloudflare API is replaced by an ``httpx.MockTransport`` so tests see
the real outbound request (URL, headers, JSON body) without a network.
"""

from typing import Any

import httpx
import pytest

from cloudflare_purge.config import settings
from cloudflare_purge.core.configuration import PluginConfiguration, resolve_configuration
from cloudflare_purge.core.models import PurgeCredentials

ZONE_ID = "0123456789abcdef0123456789abcdef"
API_TOKEN = "cf-token-abcdefghijklmnopqrstuvwxyz"


class FakeCloudflare:
    """Records purge requests and answers with a configurable response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.json: Any = {"success": True, "errors": [], "messages": [], "result": {"id": "purge-1"}}
        self.content: bytes | None = None
        self.error: Exception | None = None

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.json)


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Keep the developer's CLOUDFLARE_* environment out of the tests."""
    monkeypatch.setattr(settings, "cloudflare_zone_id", "")
    monkeypatch.setattr(settings, "cloudflare_api_token", "")
    monkeypatch.setattr(settings, "cloudflare_api_url", "https://api.cloudflare.test/client/v4")


@pytest.fixture
def cloudflare(monkeypatch) -> FakeCloudflare:
    """Route the executor's outbound call to a FakeCloudflare."""
    fake = FakeCloudflare()
    monkeypatch.setattr(
        "cloudflare_purge.services.purge_executor._client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(fake.handler)),
    )
    return fake


@pytest.fixture
def credentials() -> PurgeCredentials:
    return PurgeCredentials(zone_id=ZONE_ID, api_token=API_TOKEN)


def _make_config(**overrides: Any) -> PluginConfiguration:
    options: dict[str, Any] = {
        "enabled": True,
        "zone_id": ZONE_ID,
        "api_token": API_TOKEN,
        "base_url": "https://www.example.com",
        "collections": "ALL",
    }
    options.update(overrides)
    return resolve_configuration(**options)


@pytest.fixture
def make_config():
    """Factory for an enabled plugin configuration with test credentials."""
    return _make_config
