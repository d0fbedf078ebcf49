"""Turn a change event into a purge scope."""

import inspect
from typing import TYPE_CHECKING

from cloudflare_purge.core.models import PurgeScope, UrlBuilderArgs
from cloudflare_purge.logging_config import get_logger

if TYPE_CHECKING:
    from cloudflare_purge.core.configuration import PluginConfiguration

logger = get_logger(__name__)


def default_url_builder(args: UrlBuilderArgs) -> list[str]:
    """Infer the public URL of a document from ``path``, ``slug`` or ``id``.

    Returns at most one URL, and none when no base URL is configured.
    """
    base = (args.base_url or "").rstrip("/")
    if not base:
        return []

    doc = args.doc or {}
    if isinstance(doc.get("path"), str):
        path = doc["path"]
    elif isinstance(doc.get("slug"), str):
        path = f"/{doc['slug']}"
    elif doc.get("id"):
        path = f"/{doc['id']}"
    else:
        path = "/"

    url = f"{base}{path}"
    logger.debug(
        "Default URL builder generated URL",
        base_url=base,
        doc_path=doc.get("path"),
        doc_slug=doc.get("slug"),
        doc_id=doc.get("id"),
        generated_url=url,
    )
    return [url]


async def resolve_scope(
    args: UrlBuilderArgs,
    config: "PluginConfiguration",
    correlation_id: str,
    purge_everything: bool | None = None,
) -> PurgeScope:
    """Compute the purge scope for one event.

    Args:
        args: The event.
        config: Resolved plugin configuration.
        correlation_id: Id of the purge attempt, for log lines.
        purge_everything: Policy outcome if the caller already evaluated it
            for this event; evaluated here otherwise.

    The URL builder may be a plain function or a coroutine function, and may
    return a single URL string or an iterable of URLs.

    Returns:
        The everything scope, or a (possibly empty) file list. An empty list
        means nothing to purge.
    """
    if purge_everything is None:
        purge_everything = config.purge_everything.evaluate(args)
    if purge_everything:
        return PurgeScope.everything()

    if config.url_builder is None:
        logger.warning(
            "No url_builder configured; nothing to purge",
            correlation_id=correlation_id,
        )
        return PurgeScope.for_files([])

    urls = config.url_builder(args)
    if inspect.isawaitable(urls):
        urls = await urls
    if isinstance(urls, str):
        urls = [urls]
    urls = urls or []
    return PurgeScope.for_files([url for url in urls if url])
