"""Plugin registration: inject purge hooks into a host configuration.

Usage:
    from cloudflare_purge import cloudflare_purge_plugin

    config = cloudflare_purge_plugin(
        enabled=True,
        base_url="https://www.example.com",
        collections=["posts", "pages"],
        globals="ALL",
    )(config)

The returned callable is a pure transformation of :class:`HostConfig`:
hook chains, the endpoint list and the admin slots are extended, never
replaced, and the input object is left as it was.
"""

from collections.abc import Callable
from dataclasses import replace
from typing import Any

from cloudflare_purge.admin import AFTER_DASHBOARD, PurgeEverythingButton
from cloudflare_purge.core.configuration import ALL, PluginConfiguration, resolve_configuration
from cloudflare_purge.host import (
    AFTER_CHANGE,
    AFTER_DELETE,
    AdminConfig,
    CollectionConfig,
    Endpoint,
    GlobalConfig,
    HostConfig,
)
from cloudflare_purge.logging_config import bind_correlation_id, get_logger, new_correlation_id
from cloudflare_purge.routers.purge import PURGE_METHOD, PURGE_PATH, PurgeHandler, make_purge_handler
from cloudflare_purge.services.purge_hooks import make_after_change_hook, make_after_delete_hook

logger = get_logger(__name__)

PLUGIN_NAME = "cloudflare-purge"


def _target_set(option: tuple[str, ...] | str, registered: list[Any]) -> frozenset[str]:
    """Slugs to hook, frozen now; items registered later are not picked up."""
    if option == ALL:
        return frozenset(item.slug for item in registered)
    return frozenset(option)


def _append_hook(hooks: dict[str, list], name: str, hook: Callable) -> dict[str, list]:
    return {**hooks, name: [*hooks.get(name, []), hook]}


def apply_plugin(config: PluginConfiguration, host: HostConfig) -> HostConfig:
    """Return ``host`` augmented with this plugin's endpoint, hooks and admin button."""
    correlation_id = new_correlation_id()

    with bind_correlation_id(correlation_id):
        if config.debug:
            logger.info("Plugin configuration resolved", plugin=PLUGIN_NAME, **config.summary())

        if not config.enabled:
            logger.info("Plugin disabled via configuration, skipping", plugin=PLUGIN_NAME)
            return host

        handler: PurgeHandler | None = None
        endpoints = list(host.endpoints)
        if config.use_endpoint:
            handler = make_purge_handler(config)
            endpoints.append(Endpoint(path=PURGE_PATH, method=PURGE_METHOD, handler=handler))
            if config.debug:
                logger.info(
                    "Purge endpoint registered",
                    path=PURGE_PATH,
                    method=PURGE_METHOD,
                    total_endpoints=len(endpoints),
                )

        target_collections = _target_set(config.collections, host.collections)
        target_globals = _target_set(config.globals, host.globals)
        if config.debug:
            logger.info(
                "Purge targets identified",
                target_collections=sorted(target_collections),
                target_globals=sorted(target_globals),
                total_collections=len(host.collections),
                total_globals=len(host.globals),
            )

        hooks_added = 0

        collections: list[CollectionConfig] = []
        for collection in host.collections:
            if collection.slug not in target_collections:
                collections.append(collection)
                continue
            hooks = collection.hooks
            if config.reacts_to(AFTER_CHANGE):
                hooks = _append_hook(hooks, AFTER_CHANGE, make_after_change_hook(config, handler))
                hooks_added += 1
            if config.reacts_to(AFTER_DELETE):
                hooks = _append_hook(hooks, AFTER_DELETE, make_after_delete_hook(config, handler))
                hooks_added += 1
            if config.debug:
                logger.debug("Purge hooks added to collection", collection=collection.slug)
            collections.append(replace(collection, hooks=hooks))

        globals_: list[GlobalConfig] = []
        for global_config in host.globals:
            # Globals cannot be deleted, so only after_change applies
            if global_config.slug not in target_globals or not config.reacts_to(AFTER_CHANGE):
                globals_.append(global_config)
                continue
            hooks = _append_hook(
                global_config.hooks, AFTER_CHANGE, make_after_change_hook(config, handler)
            )
            hooks_added += 1
            if config.debug:
                logger.debug("Purge hook added to global", global_slug=global_config.slug)
            globals_.append(replace(global_config, hooks=hooks))

        admin = host.admin
        if config.show_button_purge_everything:
            components = dict(admin.components)
            components[AFTER_DASHBOARD] = [
                *components.get(AFTER_DASHBOARD, []),
                PurgeEverythingButton(make_purge_handler(config) if handler is None else handler),
            ]
            admin = AdminConfig(components=components)
            if config.debug:
                logger.info("Purge everything button added", location=AFTER_DASHBOARD)

        on_init = _wrap_on_init(
            config,
            host.on_init,
            hooks_added=hooks_added,
            target_collections=sorted(target_collections),
            target_globals=sorted(target_globals),
        )

        if config.debug:
            logger.info(
                "Plugin configured",
                plugin=PLUGIN_NAME,
                hooks_added=hooks_added,
                use_endpoint=config.use_endpoint,
            )

        return replace(
            host,
            collections=collections,
            globals=globals_,
            endpoints=endpoints,
            on_init=on_init,
            admin=admin,
        )


def _wrap_on_init(config: PluginConfiguration, previous, **registration: Any):
    """Run the plugin's init step, then always await the previous callback."""

    async def on_init(app: Any) -> None:
        with bind_correlation_id(new_correlation_id()):
            if config.credentials is None:
                logger.warning(
                    "Cloudflare credentials missing; purges will be skipped",
                    plugin=PLUGIN_NAME,
                )
            if config.debug:
                logger.info("Plugin on_init", plugin=PLUGIN_NAME, **registration)
            if previous is not None:
                await previous(app)

    return on_init


def cloudflare_purge_plugin(**options: Any) -> Callable[[HostConfig], HostConfig]:
    """Create the plugin from keyword options.

    Options are resolved once, here; see
    :func:`~cloudflare_purge.core.configuration.resolve_configuration`.
    """
    config = resolve_configuration(**options)
    if config.debug:
        logger.info(
            "Plugin options provided",
            plugin=PLUGIN_NAME,
            options_provided=sorted(k for k, v in options.items() if v is not None),
        )

    def apply(host: HostConfig) -> HostConfig:
        return apply_plugin(config, host)

    return apply
