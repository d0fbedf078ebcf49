"""Correlation ID middleware for the host application.

Stamps every HTTP request with a correlation id (taken from the
``X-Correlation-ID`` header or generated) so host request logs line up
with the purge attempts they trigger. The purge endpoint still mints its
own id per call and records this one as ``caller_correlation_id``.

Pure ASGI rather than ``BaseHTTPMiddleware`` so the context variable is
visible to the endpoint coroutine.
"""

import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cloudflare_purge.logging_config import (
    bind_correlation_id,
    get_logger,
    new_correlation_id,
)

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware:
    """Bind a request-scoped correlation id and echo it in the response."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        correlation_id = (
            headers.get(CORRELATION_ID_HEADER.lower().encode(), b"").decode()
            or new_correlation_id()
        )
        method = scope.get("method", "")
        path = scope.get("path", "")
        status_code: int | None = None
        start_time = time.perf_counter()

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status")
                response_headers = list(message.get("headers", []))
                response_headers.append(
                    (CORRELATION_ID_HEADER.lower().encode(), correlation_id.encode())
                )
                message = {**message, "headers": response_headers}
            await send(message)

        with bind_correlation_id(correlation_id):
            try:
                await self.app(scope, receive, send_wrapper)
            except Exception:
                logger.exception(
                    "Request failed",
                    method=method,
                    path=path,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                )
                raise
            logger.info(
                "Request completed",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
