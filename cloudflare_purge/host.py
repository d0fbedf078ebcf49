"""The slice of the host CMS configuration this plugin reads and augments.

The host owns its schema, auth and persistence; the plugin only sees
collection/global slugs, their lifecycle hook chains, the endpoint list,
the ``on_init`` slot and the admin component slots.

Hook chains are ordered lists keyed by lifecycle name (``after_change``,
``after_delete``). The host awaits each hook in order with a
:class:`HookArgs` and threads the returned document to the next one.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import Any

AFTER_CHANGE = "after_change"
AFTER_DELETE = "after_delete"

Hook = Callable[["HookArgs"], Awaitable[Any]]
OnInit = Callable[[Any], Awaitable[None]]


@dataclass(frozen=True)
class CollectionConfig:
    """A collection registered with the host."""

    slug: str
    hooks: dict[str, list[Hook]] = field(default_factory=dict)
    drafts: bool = False


@dataclass(frozen=True)
class GlobalConfig:
    """A global (singleton document) registered with the host."""

    slug: str
    hooks: dict[str, list[Hook]] = field(default_factory=dict)
    drafts: bool = False


@dataclass(frozen=True)
class Endpoint:
    """A custom HTTP endpoint registered with the host."""

    path: str
    method: str
    handler: Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class AdminConfig:
    components: dict[str, list[Any]] = field(default_factory=dict)


@dataclass(frozen=True)
class HostConfig:
    collections: list[CollectionConfig] = field(default_factory=list)
    globals: list[GlobalConfig] = field(default_factory=list)
    endpoints: list[Endpoint] = field(default_factory=list)
    on_init: OnInit | None = None
    admin: AdminConfig = field(default_factory=AdminConfig)


@dataclass
class HostRequest:
    """The host request a hook runs under."""

    user: Any = None
    locale: str | None = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class HookArgs:
    """Arguments the host passes to every lifecycle hook.

    Exactly one of ``collection`` / ``global_config`` is set.
    """

    doc: dict[str, Any]
    operation: str
    previous_doc: dict[str, Any] | None = None
    collection: CollectionConfig | None = None
    global_config: GlobalConfig | None = None
    req: HostRequest | None = None


async def run_hook_chain(chain: list[Hook], args: HookArgs) -> dict[str, Any]:
    """Run a hook chain the way the host does.

    Each hook receives the document returned by the previous one.
    """
    doc = args.doc
    for hook in chain:
        result = await hook(replace(args, doc=doc))
        if result is not None:
            doc = result
    return doc
