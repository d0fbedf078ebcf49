"""Cloudflare cache purging for content-management lifecycle events."""

from cloudflare_purge.core.configuration import PluginConfiguration, resolve_configuration
from cloudflare_purge.core.exceptions import PurgeEndpointError, PurgeError, PurgeFailedError
from cloudflare_purge.core.models import PurgeResult, PurgeScope, UrlBuilderArgs
from cloudflare_purge.plugin import apply_plugin, cloudflare_purge_plugin
from cloudflare_purge.services.scope_resolver import default_url_builder

__all__ = [
    "PluginConfiguration",
    "PurgeEndpointError",
    "PurgeError",
    "PurgeFailedError",
    "PurgeResult",
    "PurgeScope",
    "UrlBuilderArgs",
    "apply_plugin",
    "cloudflare_purge_plugin",
    "default_url_builder",
    "resolve_configuration",
]
