"""Purge executor: the single outbound call to the Cloudflare purge API.

One POST per attempt, no retry, no timeout beyond the httpx default.
A missing credential pair is a logged skip. Network failures and provider
rejections are raised to the caller; the purge endpoint is where they get
turned into an HTTP response.
"""

import time
from typing import Any

import httpx

from cloudflare_purge.config import settings
from cloudflare_purge.core.exceptions import PurgeFailedError
from cloudflare_purge.core.models import (
    PurgeContext,
    PurgeCredentials,
    PurgeResult,
    PurgeScope,
)
from cloudflare_purge.core.redaction import redact
from cloudflare_purge.logging_config import get_logger

logger = get_logger(__name__)


def purge_endpoint_url(zone_id: str) -> str:
    return f"{settings.cloudflare_api_url.rstrip('/')}/zones/{zone_id}/purge_cache"


def _client() -> httpx.AsyncClient:
    """Client for one purge call; transport-default timeout."""
    return httpx.AsyncClient()


def _parse_body(resp: httpx.Response) -> Any:
    """Decode the response JSON, or ``None`` when it is not JSON."""
    try:
        return resp.json()
    except ValueError:
        return None


async def execute(
    scope: PurgeScope,
    credentials: PurgeCredentials | None,
    context: PurgeContext,
) -> PurgeResult:
    """Send one purge request to Cloudflare.

    Args:
        scope: URL list or everything.
        credentials: Zone id and API token; ``None`` skips the call.
        context: Correlation id and verbosity flags for this attempt.

    Returns:
        PurgeResult. ``succeeded`` is True only for a confirmed purge;
        a skip returns ``succeeded=False, http_status=0``.

    Raises:
        httpx.HTTPError: The request did not complete.
        PurgeFailedError: Cloudflare answered but did not confirm the purge.
    """
    correlation_id = context.correlation_id

    if credentials is None:
        logger.warning(
            "Cloudflare not configured (zone id / API token missing), skipping purge",
            correlation_id=correlation_id,
        )
        return PurgeResult(succeeded=False, http_status=0, correlation_id=correlation_id)

    endpoint = purge_endpoint_url(credentials.zone_id)
    body = scope.to_provider_body()

    logger.info(
        "Starting Cloudflare purge",
        correlation_id=correlation_id,
        zone_id=redact(credentials.zone_id),
        purge_everything=scope.purge_everything,
        files_count=len(scope.files),
    )
    if context.debug:
        logger.info(
            "Cloudflare purge payload",
            correlation_id=correlation_id,
            endpoint=endpoint.replace(credentials.zone_id, redact(credentials.zone_id)),
            body=body,
            token=redact(credentials.api_token),
        )

    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {credentials.api_token}",
    }

    started = time.perf_counter()
    try:
        async with _client() as client:
            resp = await client.post(endpoint, headers=headers, json=body)
    except httpx.HTTPError as exc:
        logger.error(
            "Network failure calling Cloudflare",
            correlation_id=correlation_id,
            error=str(exc),
            error_type=type(exc).__name__,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
        )
        raise
    elapsed_ms = int((time.perf_counter() - started) * 1000)

    provider_response = _parse_body(resp)
    is_success = 200 <= resp.status_code < 300

    logger.info(
        "Cloudflare response received",
        correlation_id=correlation_id,
        status=resp.status_code,
        ok=is_success,
        elapsed_ms=elapsed_ms,
    )
    if context.debug and context.log_provider_json:
        logger.info(
            "Cloudflare response body",
            correlation_id=correlation_id,
            cloudflare_response=provider_response,
        )

    rejected = isinstance(provider_response, dict) and provider_response.get("success") is False
    if not is_success or rejected:
        errors = provider_response.get("errors") if isinstance(provider_response, dict) else None
        messages = provider_response.get("messages") if isinstance(provider_response, dict) else None
        logger.error(
            "Cloudflare purge not confirmed",
            correlation_id=correlation_id,
            status=resp.status_code,
            cloudflare_errors=errors,
            cloudflare_messages=messages,
        )
        raise PurgeFailedError(resp.status_code, correlation_id, errors, messages)

    logger.info("Cloudflare purge completed", correlation_id=correlation_id)

    return PurgeResult(
        succeeded=True,
        http_status=resp.status_code,
        correlation_id=correlation_id,
        endpoint=endpoint,
        scope_sent=body,
        provider_response=provider_response,
        elapsed_ms=elapsed_ms,
    )
