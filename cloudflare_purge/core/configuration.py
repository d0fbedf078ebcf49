"""Resolved plugin configuration.

:func:`resolve_configuration` turns the keyword options a host passes to
the plugin into a frozen :class:`PluginConfiguration`: defaults applied,
credentials resolved (explicit option first, then the environment), target
slugs normalised. It runs once per plugin instance, at registration time;
every installed hook closes over the result.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Literal

from cloudflare_purge.config import settings
from cloudflare_purge.core.models import PurgeCredentials, UrlBuilderArgs
from cloudflare_purge.host import AFTER_CHANGE, AFTER_DELETE

ALL = "ALL"
VALID_EVENTS = (AFTER_CHANGE, AFTER_DELETE)

UrlBuilderResult = Iterable[str] | str | None
UrlBuilder = Callable[[UrlBuilderArgs], UrlBuilderResult | Awaitable[UrlBuilderResult]]
TargetSlugs = tuple[str, ...] | Literal["ALL"]


@dataclass(frozen=True)
class StaticPolicy:
    """Purge-everything decided once, for every event."""

    value: bool

    def evaluate(self, args: UrlBuilderArgs) -> bool:
        return self.value


@dataclass(frozen=True)
class ComputedPolicy:
    """Purge-everything decided per event by a user function."""

    fn: Callable[[UrlBuilderArgs], bool]

    def evaluate(self, args: UrlBuilderArgs) -> bool:
        return bool(self.fn(args))


PurgeEverythingPolicy = StaticPolicy | ComputedPolicy


def as_policy(value: bool | Callable[[UrlBuilderArgs], bool] | PurgeEverythingPolicy) -> PurgeEverythingPolicy:
    """Wrap a ``purge_everything`` option in its policy variant."""
    if isinstance(value, (StaticPolicy, ComputedPolicy)):
        return value
    if callable(value):
        return ComputedPolicy(value)
    return StaticPolicy(bool(value))


class _Unset:
    def __repr__(self) -> str:
        return "<unset>"


_UNSET: Any = _Unset()


@dataclass(frozen=True)
class PluginConfiguration:
    """Fully resolved options of one plugin instance."""

    enabled: bool = False
    credentials: PurgeCredentials | None = None
    base_url: str = ""
    collections: TargetSlugs = ()
    globals: TargetSlugs = ()
    localized: bool = False
    events: tuple[str, ...] = VALID_EVENTS
    purge_everything: PurgeEverythingPolicy = StaticPolicy(False)
    url_builder: UrlBuilder | None = None
    use_endpoint: bool = True
    show_button_purge_everything: bool = False
    debug: bool = False
    log_provider_json: bool = False

    def reacts_to(self, event: str) -> bool:
        return event in self.events

    def summary(self) -> dict[str, Any]:
        """Log-safe view of the configuration (no secrets)."""
        return {
            "enabled": self.enabled,
            "use_endpoint": self.use_endpoint,
            "events": list(self.events),
            "collections": self.collections if self.collections == ALL else len(self.collections),
            "globals": self.globals if self.globals == ALL else len(self.globals),
            "has_credentials": self.credentials is not None,
            "base_url": self.base_url or "not-set",
        }


def _normalise_targets(name: str, value: Iterable[str] | str | None) -> TargetSlugs:
    if value is None:
        return ()
    if value == ALL:
        return ALL
    if isinstance(value, str):
        raise ValueError(f"{name} must be 'ALL' or a list of slugs, got {value!r}")
    return tuple(value)


def resolve_configuration(
    *,
    enabled: bool = False,
    zone_id: str | None = None,
    api_token: str | None = None,
    base_url: str | None = None,
    collections: Iterable[str] | str | None = None,
    globals: Iterable[str] | str | None = None,
    localized: bool = False,
    events: Iterable[str] | None = None,
    purge_everything: bool | Callable[[UrlBuilderArgs], bool] = False,
    url_builder: UrlBuilder | None = _UNSET,
    use_endpoint: bool = True,
    show_button_purge_everything: bool = False,
    debug: bool = False,
    log_provider_json: bool = False,
) -> PluginConfiguration:
    """Apply defaults and validate plugin options.

    ``zone_id`` / ``api_token`` fall back to ``CLOUDFLARE_ZONE_ID`` /
    ``CLOUDFLARE_API_TOKEN``. Omitting ``url_builder`` selects
    :func:`~cloudflare_purge.services.scope_resolver.default_url_builder`;
    passing ``None`` explicitly leaves selective purges with nothing to build.

    Raises:
        ValueError: unknown event name or malformed target slugs.
        TypeError: unknown option name (raised by Python for the call).
    """
    from cloudflare_purge.services.scope_resolver import default_url_builder

    resolved_events = tuple(events) if events is not None else VALID_EVENTS
    unknown = [e for e in resolved_events if e not in VALID_EVENTS]
    if unknown:
        raise ValueError(
            f"Unknown events {unknown}; expected a subset of {list(VALID_EVENTS)}"
        )

    zone = zone_id if zone_id is not None else settings.cloudflare_zone_id
    token = api_token if api_token is not None else settings.cloudflare_api_token
    credentials = PurgeCredentials(zone_id=zone, api_token=token) if zone and token else None

    return PluginConfiguration(
        enabled=enabled,
        credentials=credentials,
        base_url=base_url or "",
        collections=_normalise_targets("collections", collections),
        globals=_normalise_targets("globals", globals),
        localized=localized,
        events=resolved_events,
        purge_everything=as_policy(purge_everything),
        url_builder=default_url_builder if url_builder is _UNSET else url_builder,
        use_endpoint=use_endpoint,
        show_button_purge_everything=show_button_purge_everything,
        debug=debug,
        log_provider_json=log_provider_json,
    )
