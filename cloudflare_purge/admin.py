"""Manual "purge everything" control for the host admin dashboard.

Not part of the event pipeline. The button is shown to admins only and
sends ``{"purgeEverything": true}`` through the same purge handler the
HTTP endpoint uses, as the clicking user (never as an internal call).
"""

import json
from dataclasses import dataclass
from typing import Any

from cloudflare_purge.core.auth import is_elevated, user_id
from cloudflare_purge.logging_config import get_logger
from cloudflare_purge.routers.purge import EndpointRequest, PurgeHandler

logger = get_logger(__name__)

AFTER_DASHBOARD = "after_dashboard"


@dataclass(frozen=True)
class AdminActionResult:
    """What the dashboard shows after a click."""

    status: str  # 'success' or 'error'
    message: str
    correlation_id: str | None = None


class PurgeEverythingButton:
    """Admin dashboard component issuing a full-zone purge."""

    name = "PurgeEverythingButton"
    title = "Cloudflare cache"
    description = (
        "Purge every file from the Cloudflare cache. Use sparingly: the site "
        "may be slower for a few minutes while the cache warms up again."
    )

    def __init__(self, handler: PurgeHandler):
        self._handler = handler

    def is_visible(self, user: Any) -> bool:
        return is_elevated(user)

    async def click(self, user: Any) -> AdminActionResult:
        """Purge the whole zone on behalf of ``user``."""
        if not self.is_visible(user):
            logger.warning("Purge everything denied", user_id=user_id(user))
            return AdminActionResult(status="error", message="Admin role required")

        response = await self._handler(
            EndpointRequest(user=user, body={"purgeEverything": True})
        )
        data = json.loads(response.body)
        correlation_id = data.get("correlationId")

        if response.status_code != 200:
            return AdminActionResult(
                status="error",
                message=data.get("error") or "Failed to execute purge",
                correlation_id=correlation_id,
            )
        if not data.get("success"):
            return AdminActionResult(
                status="error",
                message=f"Purge skipped: Cloudflare not configured (ID: {correlation_id})",
                correlation_id=correlation_id,
            )
        return AdminActionResult(
            status="success",
            message=f"Success! (ID: {correlation_id})",
            correlation_id=correlation_id,
        )
