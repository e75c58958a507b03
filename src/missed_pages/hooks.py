"""Hook handlers the host wiki calls directly.

There is no plugin discovery: the host's event dispatcher looks handlers up
in :data:`HOOKS` by event name and calls them with plain arguments.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from missed_pages.db.connection import ConnectionFactory
from missed_pages.db.errors import StorageUnavailable
from missed_pages.db.schema import ensure_schema
from missed_pages.service import MissedPagesService
from missed_pages.titles import InvalidTitle

logger = logging.getLogger(__name__)


def on_load_extension_schema_updates(connect: ConnectionFactory | None = None) -> None:
    """Create the ledger table during the host's schema update run."""
    ensure_schema(connect)


def on_show_missing_article(service: MissedPagesService, title: str) -> bool:
    """Record a request for a page that does not exist.

    Page rendering must never fail because of the ledger, so storage and
    title errors are logged and swallowed here.

    Returns:
        True when a miss event was written.
    """
    try:
        return service.record_missing_page(title)
    except InvalidTitle as exc:
        logger.warning("Not recording missed page: %s", exc)
    except StorageUnavailable as exc:
        logger.warning("Could not record missed page %r: %s", title, exc)
    return False


HOOKS: dict[str, Callable[..., Any]] = {
    "LoadExtensionSchemaUpdates": on_load_extension_schema_updates,
    "ShowMissingArticle": on_show_missing_article,
}
