"""Value types shared by the purge pipeline.

Pure data, no I/O. Everything here is frozen: a scope or a set of
credentials is built once and then only read.
"""

from dataclasses import dataclass, field
from typing import Any

from cloudflare_purge.core.redaction import redact
from cloudflare_purge.host import HostRequest


@dataclass(frozen=True)
class PurgeScope:
    """What one purge attempt invalidates: a URL list or the whole zone.

    Use :meth:`everything` or :meth:`for_files` rather than the constructor;
    the everything variant never carries files.
    """

    purge_everything: bool = False
    files: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.purge_everything and self.files:
            object.__setattr__(self, "files", ())

    @classmethod
    def everything(cls) -> "PurgeScope":
        return cls(purge_everything=True)

    @classmethod
    def for_files(cls, files: list[str] | tuple[str, ...] | None) -> "PurgeScope":
        return cls(purge_everything=False, files=tuple(files or ()))

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to purge (selective scope, no URLs)."""
        return not self.purge_everything and not self.files

    def to_provider_body(self) -> dict[str, Any]:
        """Request body for the Cloudflare purge_cache API."""
        if self.purge_everything:
            return {"purge_everything": True}
        return {"files": list(self.files)}


@dataclass(frozen=True)
class PurgeRequest:
    """A scope bound to the correlation id of the event that produced it."""

    scope: PurgeScope
    correlation_id: str


@dataclass(frozen=True)
class PurgeCredentials:
    """Cloudflare zone id and API token. Never log these unmasked."""

    zone_id: str
    api_token: str = field(repr=False)

    def redacted(self) -> dict[str, str]:
        return {"zone_id": redact(self.zone_id), "api_token": redact(self.api_token)}


@dataclass(frozen=True)
class PurgeContext:
    """Logging context for one purge attempt."""

    correlation_id: str
    debug: bool = False
    log_provider_json: bool = False


@dataclass(frozen=True)
class PurgeResult:
    """Outcome of one call to the purge executor.

    ``succeeded=False`` with ``http_status=0`` means the purge was skipped
    because credentials are not configured.
    """

    succeeded: bool
    http_status: int
    correlation_id: str
    endpoint: str = ""
    scope_sent: dict[str, Any] = field(default_factory=dict)
    provider_response: Any = None
    elapsed_ms: int = 0

    @property
    def skipped(self) -> bool:
        return not self.succeeded and self.http_status == 0


@dataclass(frozen=True)
class UrlBuilderArgs:
    """One lifecycle event, as seen by ``url_builder`` and policy functions.

    Exactly one of ``collection_slug`` / ``global_slug`` is set. ``locale``
    is only populated when the plugin runs with ``localized=True``.
    """

    doc: dict[str, Any]
    operation: str
    base_url: str = ""
    collection_slug: str | None = None
    global_slug: str | None = None
    locale: str | None = None
    req: HostRequest | None = field(default=None, compare=False)
