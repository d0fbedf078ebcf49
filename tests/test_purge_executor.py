"""Tests for the Cloudflare purge executor."""

import json
import logging

import httpx
import pytest

from cloudflare_purge.core.exceptions import PurgeFailedError
from cloudflare_purge.core.models import PurgeContext, PurgeScope
from cloudflare_purge.services.purge_executor import execute
from conftest import API_TOKEN, ZONE_ID

CONTEXT = PurgeContext(correlation_id="corr-1")


class TestSkipWhenNotConfigured:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "scope",
        [PurgeScope.everything(), PurgeScope.for_files(["https://x.com/a"]), PurgeScope.for_files([])],
    )
    async def test_returns_skip_without_network_call(self, cloudflare, scope):
        result = await execute(scope, None, CONTEXT)

        assert result.succeeded is False
        assert result.http_status == 0
        assert result.skipped is True
        assert result.correlation_id == "corr-1"
        assert cloudflare.call_count == 0

    @pytest.mark.asyncio
    async def test_logs_warning_with_correlation_id(self, cloudflare, caplog):
        with caplog.at_level(logging.WARNING):
            await execute(PurgeScope.everything(), None, CONTEXT)

        warning = next(r for r in caplog.records if r.levelno == logging.WARNING)
        assert warning.extra_fields["correlation_id"] == "corr-1"


class TestSuccessfulPurge:
    @pytest.mark.asyncio
    async def test_file_purge_round_trip(self, cloudflare, credentials):
        scope = PurgeScope.for_files(["https://x.com/a", "https://x.com/b"])

        result = await execute(scope, credentials, CONTEXT)

        assert result.succeeded is True
        assert result.http_status == 200
        assert result.scope_sent == {"files": ["https://x.com/a", "https://x.com/b"]}
        assert result.provider_response["success"] is True
        assert result.elapsed_ms >= 0
        assert result.correlation_id == "corr-1"

    @pytest.mark.asyncio
    async def test_sends_bearer_token_to_zone_endpoint(self, cloudflare, credentials):
        await execute(PurgeScope.for_files(["https://x.com/a"]), credentials, CONTEXT)

        request = cloudflare.requests[0]
        assert request.method == "POST"
        assert str(request.url) == (
            f"https://api.cloudflare.test/client/v4/zones/{ZONE_ID}/purge_cache"
        )
        assert request.headers["Authorization"] == f"Bearer {API_TOKEN}"
        assert json.loads(request.content) == {"files": ["https://x.com/a"]}

    @pytest.mark.asyncio
    async def test_everything_body(self, cloudflare, credentials):
        result = await execute(PurgeScope.everything(), credentials, CONTEXT)

        assert json.loads(cloudflare.requests[0].content) == {"purge_everything": True}
        assert result.scope_sent == {"purge_everything": True}

    @pytest.mark.asyncio
    async def test_non_json_success_body_is_tolerated(self, cloudflare, credentials):
        cloudflare.content = b"<html>ok</html>"

        result = await execute(PurgeScope.everything(), credentials, CONTEXT)

        assert result.succeeded is True
        assert result.provider_response is None

    @pytest.mark.asyncio
    async def test_token_never_logged(self, cloudflare, credentials, caplog):
        debug_context = PurgeContext(correlation_id="corr-1", debug=True, log_provider_json=True)

        with caplog.at_level(logging.DEBUG):
            await execute(PurgeScope.everything(), credentials, debug_context)

        for record in caplog.records:
            rendered = json.dumps(getattr(record, "extra_fields", {}), default=str)
            assert API_TOKEN not in rendered
            assert ZONE_ID not in rendered

    @pytest.mark.asyncio
    async def test_provider_json_logged_only_in_debug(self, cloudflare, credentials, caplog):
        with caplog.at_level(logging.INFO):
            await execute(PurgeScope.everything(), credentials, CONTEXT)

        assert not any("cloudflare_response" in getattr(r, "extra_fields", {}) for r in caplog.records)


class TestProviderRejection:
    @pytest.mark.asyncio
    async def test_success_false_with_200_raises(self, cloudflare, credentials):
        cloudflare.json = {"success": False, "errors": [{"code": 1012, "message": "bad"}]}

        with pytest.raises(PurgeFailedError) as exc_info:
            await execute(PurgeScope.everything(), credentials, CONTEXT)

        assert exc_info.value.status == 200
        assert exc_info.value.correlation_id == "corr-1"
        assert exc_info.value.errors == [{"code": 1012, "message": "bad"}]

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self, cloudflare, credentials):
        cloudflare.status_code = 403
        cloudflare.json = {"success": False, "errors": [{"code": 10000, "message": "Authentication error"}]}

        with pytest.raises(PurgeFailedError, match="status=403 id=corr-1"):
            await execute(PurgeScope.for_files(["https://x.com/a"]), credentials, CONTEXT)

    @pytest.mark.asyncio
    async def test_non_2xx_without_json_raises(self, cloudflare, credentials):
        cloudflare.status_code = 502
        cloudflare.content = b"Bad gateway"

        with pytest.raises(PurgeFailedError) as exc_info:
            await execute(PurgeScope.everything(), credentials, CONTEXT)

        assert exc_info.value.status == 502
        assert exc_info.value.errors == []

    @pytest.mark.asyncio
    async def test_rejection_logged_as_error(self, cloudflare, credentials, caplog):
        cloudflare.status_code = 429

        with caplog.at_level(logging.ERROR), pytest.raises(PurgeFailedError):
            await execute(PurgeScope.everything(), credentials, CONTEXT)

        error = next(r for r in caplog.records if r.levelno == logging.ERROR)
        assert error.extra_fields["status"] == 429
        assert error.extra_fields["correlation_id"] == "corr-1"


class TestNetworkFailure:
    @pytest.mark.asyncio
    async def test_connect_error_propagates(self, cloudflare, credentials, caplog):
        cloudflare.error = httpx.ConnectError("Connection refused")

        with caplog.at_level(logging.ERROR), pytest.raises(httpx.ConnectError):
            await execute(PurgeScope.everything(), credentials, CONTEXT)

        error = next(r for r in caplog.records if r.levelno == logging.ERROR)
        assert error.extra_fields["correlation_id"] == "corr-1"
        assert error.extra_fields["error_type"] == "ConnectError"

    @pytest.mark.asyncio
    async def test_timeout_propagates(self, cloudflare, credentials):
        cloudflare.error = httpx.ReadTimeout("timed out")

        with pytest.raises(httpx.TimeoutException):
            await execute(PurgeScope.everything(), credentials, CONTEXT)
