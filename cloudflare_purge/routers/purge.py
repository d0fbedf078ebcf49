"""Purge endpoint.

``POST /cloudflare-purge`` exposes the purge executor over HTTP. The
handler is a plain coroutine over :class:`EndpointRequest` so hooks can
call it in-process; :func:`build_router` adapts it to FastAPI for real
HTTP callers. It is the failure boundary of the pipeline: whatever the
executor raises comes back as a JSON 500 carrying the correlation id.
"""

import json
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from cloudflare_purge.core.auth import get_optional_user, is_internal_call, user_id
from cloudflare_purge.core.configuration import PluginConfiguration
from cloudflare_purge.core.models import PurgeContext, PurgeScope
from cloudflare_purge.logging_config import (
    bind_correlation_id,
    get_logger,
    new_correlation_id,
)
from cloudflare_purge.middleware.correlation import CORRELATION_ID_HEADER
from cloudflare_purge.schemas.purge import (
    PurgeDetails,
    PurgeErrorResponse,
    PurgeRequestBody,
    PurgeResponse,
)
from cloudflare_purge.services.purge_executor import execute

logger = get_logger(__name__)

PURGE_PATH = "/cloudflare-purge"
PURGE_METHOD = "post"

# Longest error message echoed back to HTTP clients
MAX_ERROR_DETAIL_LENGTH = 500


@dataclass
class EndpointRequest:
    """What the handler needs from a request, HTTP or in-process."""

    user: Any = None
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)


PurgeHandler = Callable[[EndpointRequest], Awaitable[JSONResponse]]


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return None


def _truncate(message: str) -> str:
    if len(message) <= MAX_ERROR_DETAIL_LENGTH:
        return message
    return message[: MAX_ERROR_DETAIL_LENGTH - 3] + "..."


def _error(status_code: int, error: str, correlation_id: str, details: Any = None) -> JSONResponse:
    fields: dict[str, Any] = {"error": error, "correlation_id": correlation_id}
    if details is not None:
        fields["details"] = details
    payload = PurgeErrorResponse(**fields)
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(by_alias=True, exclude_unset=True),
    )


def make_purge_handler(config: PluginConfiguration) -> PurgeHandler:
    """Build the endpoint handler for one plugin instance."""

    async def handle(request: EndpointRequest) -> JSONResponse:
        correlation_id = new_correlation_id()
        with bind_correlation_id(correlation_id):
            return await _handle(config, request, correlation_id)

    return handle


async def _handle(
    config: PluginConfiguration,
    request: EndpointRequest,
    correlation_id: str,
) -> JSONResponse:
    internal_call = is_internal_call(request.headers)

    if not internal_call and request.user is None:
        logger.warning("Unauthorized purge request", correlation_id=correlation_id)
        return _error(status.HTTP_401_UNAUTHORIZED, "Not authorized", correlation_id)

    try:
        body = PurgeRequestBody.model_validate(request.body if request.body is not None else {})
    except ValidationError as exc:
        logger.warning(
            "Invalid purge request body",
            correlation_id=correlation_id,
            error=str(exc),
        )
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request body",
            correlation_id,
            _truncate(str(exc)),
        )

    scope = PurgeScope.everything() if body.purge_everything else PurgeScope.for_files(body.files)

    logger.info(
        "Purge endpoint called",
        correlation_id=correlation_id,
        caller_correlation_id=_header(request.headers, CORRELATION_ID_HEADER),
        user_id=user_id(request.user),
        files_count=len(scope.files),
        purge_everything=scope.purge_everything,
        internal_call=internal_call,
    )

    try:
        result = await execute(
            scope,
            config.credentials,
            PurgeContext(
                correlation_id=correlation_id,
                debug=config.debug,
                log_provider_json=config.log_provider_json,
            ),
        )
    except Exception as exc:
        logger.exception(
            "Purge endpoint failed",
            correlation_id=correlation_id,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to execute purge",
            correlation_id,
            _truncate(str(exc)),
        )

    fields: dict[str, Any] = {
        "success": result.succeeded,
        "correlation_id": correlation_id,
        "details": PurgeDetails(
            status=result.http_status,
            files_purged=len(scope.files),
            purge_everything=scope.purge_everything,
            execution_time=f"{result.elapsed_ms}ms",
        ),
    }
    # Provider internals stay out of default responses
    if config.debug:
        fields["cloudflare_response"] = result.provider_response
    response = PurgeResponse(**fields)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response.model_dump(by_alias=True, exclude_unset=True),
    )


def build_router(handler: PurgeHandler, path: str = PURGE_PATH) -> APIRouter:
    """Expose a purge handler as ``POST {path}`` on a FastAPI router."""
    router = APIRouter(tags=["cloudflare-purge"])

    @router.post(
        path,
        response_model=None,
        responses={
            200: {"model": PurgeResponse, "description": "Purge attempted"},
            400: {"model": PurgeErrorResponse, "description": "Invalid body"},
            401: {"model": PurgeErrorResponse, "description": "Not authenticated"},
            500: {"model": PurgeErrorResponse, "description": "Purge failed"},
        },
    )
    async def purge_cache(
        request: Request,
        user: Annotated[Any, Depends(get_optional_user)],
    ) -> JSONResponse:
        """Purge URLs, or the whole zone, from the Cloudflare cache."""
        raw = await request.body()
        try:
            body: Any = json.loads(raw) if raw else {}
        except ValueError:
            body = raw.decode(errors="replace")
        return await handler(EndpointRequest(user=user, body=body, headers=request.headers))

    return router
