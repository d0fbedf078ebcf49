"""Decide whether a change event warrants a purge.

On draft-enabled content only a transition into ``published`` counts;
saving a draft never touches the cache.
"""

from typing import Any

from cloudflare_purge.host import CollectionConfig, GlobalConfig

STATUS_FIELD = "_status"
PUBLISHED = "published"


def drafts_enabled(metadata: CollectionConfig | GlobalConfig | None) -> bool:
    return bool(metadata is not None and metadata.drafts)


def is_purge_worthy(
    metadata: CollectionConfig | GlobalConfig | None,
    doc: dict[str, Any] | None,
    previous_doc: dict[str, Any] | None,
) -> bool:
    """Return True for a publish-equivalent change.

    Without drafts every change qualifies. With drafts the document must
    move from any non-published status to ``published``.
    """
    if not drafts_enabled(metadata):
        return True
    current = (doc or {}).get(STATUS_FIELD)
    before = (previous_doc or {}).get(STATUS_FIELD)
    return current == PUBLISHED and before != PUBLISHED
