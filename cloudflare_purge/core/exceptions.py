"""Purge error taxonomy.

Network failures are not wrapped: the ``httpx.HTTPError`` raised by the
transport propagates as-is.
"""

from typing import Any


class PurgeError(Exception):
    """Base exception for purge failures."""

    def __init__(self, message: str, correlation_id: str):
        super().__init__(message)
        self.correlation_id = correlation_id


class PurgeFailedError(PurgeError):
    """Cloudflare answered but did not confirm the purge.

    Raised for a non-2xx status, or a 2xx whose body says ``success: false``.
    """

    def __init__(
        self,
        status: int,
        correlation_id: str,
        errors: list[Any] | None = None,
        messages: list[Any] | None = None,
    ):
        super().__init__(
            f"Cloudflare purge failed: status={status} id={correlation_id}",
            correlation_id,
        )
        self.status = status
        self.errors = errors or []
        self.messages = messages or []


class PurgeEndpointError(PurgeError):
    """The purge endpoint, invoked in-process, answered with a non-200 status."""

    def __init__(self, status: int, correlation_id: str, body: Any = None):
        super().__init__(
            f"Purge endpoint returned status={status} id={correlation_id}",
            correlation_id,
        )
        self.status = status
        self.body = body
