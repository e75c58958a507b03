"""Missed-pages ledger service.

``MissedPagesService`` enforces the per-title state transitions on top of
:class:`~missed_pages.db.ledger_repo.LedgerStore`::

    Untracked ──record──▶ Logged(N) ──ignore──▶ Ignored
        ▲                    │  │                  │
        └──────delete────────┘  └──redirect──┐     │
        ▲                                    ▼     │
        └─────────────delete─────────────────┴─────┘

Every method accepts raw title text and normalizes it with
:class:`~missed_pages.titles.Title` before touching the store.

The service embeds no authorization; callers gate ``ignore``, ``delete`` and
``redirect`` on the host's capability checks. Storage and editor errors
propagate unchanged and nothing is retried. The one condition absorbed here
is "title is ignored", which makes ``record_missing_page`` a silent no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from missed_pages.db.ledger_repo import LedgerStore
from missed_pages.db.types import MissRecord, TitleCount
from missed_pages.editing import ContentEditor
from missed_pages.titles import InvalidTitle, Title

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 100
DEFAULT_TREND_MAX_DAYS = 300
DEFAULT_REDIRECT_COMMENT = "Redirected from the missed pages log"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MissedPagesService:
    """Business logic for the missed-pages ledger.

    Args:
        store: Ledger persistence.
        editor: Content editor used by :meth:`redirect`. Optional for
            deployments that only record and review misses.
        redirect_comment: Edit summary for redirects created here.
        namespaces: Namespace names used for title normalization; ``None``
            uses the configured list.
        clock: Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        store: LedgerStore,
        *,
        editor: ContentEditor | None = None,
        redirect_comment: str = DEFAULT_REDIRECT_COMMENT,
        namespaces: Iterable[str] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.editor = editor
        self.redirect_comment = redirect_comment
        self._namespaces = list(namespaces) if namespaces is not None else None
        self._clock = clock

    def title(self, text: str) -> Title:
        """Normalize ``text`` into a :class:`Title` (raises ``InvalidTitle``)."""
        return Title.from_text(text, namespaces=self._namespaces)

    def display_title(self, key: str) -> str:
        """Human-readable form of a stored key, using this service's namespaces."""
        try:
            return Title.from_db_key(key, namespaces=self._namespaces).prefixed_text
        except InvalidTitle:
            return key.replace("_", " ")

    # ── Mutators ──────────────────────────────────────────────────────────────

    def record_missing_page(self, title: str) -> bool:
        """Log one request for a page that does not exist.

        Returns:
            True when a miss event was written, False when the title is
            ignored.
        """
        key = self.title(title).prefixed_db_key
        if self.store.count_where(key, ignored=True) > 0:
            return False
        self.store.insert(key, ignored=False, timestamp=self._clock())
        return True

    def ignore(self, title: str) -> None:
        """Replace all rows for a title with a single ignore marker."""
        key = self.title(title).prefixed_db_key
        self.store.replace_with_ignore_marker(key, timestamp=self._clock())
        logger.info("Ignoring missed page %r", key)

    def delete(self, title: str) -> int:
        """Remove every row (events and ignore marker) for a title."""
        key = self.title(title).prefixed_db_key
        removed = self.store.delete_where(key)
        logger.info("Deleted %d missed page row(s) for %r", removed, key)
        return removed

    def redirect(
        self,
        from_title: str,
        to_title: str,
        editor: str,
        *,
        content_editor: ContentEditor | None = None,
    ) -> Title:
        """Turn a missing page into a redirect, then clear its ledger rows.

        Both titles are validated before any side effect. The ledger is only
        touched after the content editor reports success, so a refused edit
        leaves the rows exactly as they were.

        Args:
            from_title: Missing page to create.
            to_title: Existing page the redirect points at.
            editor: Identity of the acting user, for attribution.
            content_editor: Overrides the service's editor for this call.

        Returns:
            The normalized source title.

        Raises:
            InvalidTitle: Either title is invalid, or both are the same page.
            EditConflict, EditRejected: The content editor refused the write.
            RuntimeError: No content editor is available.
        """
        source = self.title(from_title)
        target = self.title(to_title)
        if source.prefixed_db_key == target.prefixed_db_key:
            raise InvalidTitle(to_title, "a page cannot redirect to itself")

        writer = content_editor or self.editor
        if writer is None:
            raise RuntimeError("No content editor is configured for redirects.")

        writer.save_redirect(source, target, editor, self.redirect_comment)
        self.store.delete_where(source.prefixed_db_key)
        logger.info(
            "Redirected missed page %r to %r (by %s)",
            source.prefixed_db_key,
            target.prefixed_db_key,
            editor,
        )
        return source

    # ── Reads ─────────────────────────────────────────────────────────────────

    def get_log_entries(self, limit: int = DEFAULT_LOG_LIMIT) -> list[TitleCount]:
        """Titles with miss events, most missed first, at most ``limit`` rows."""
        return self.store.grouped_counts(ignored=False, limit=limit)

    def get_ignored_entries(self) -> list[TitleCount]:
        """All ignored titles."""
        return self.store.grouped_counts(ignored=True)

    def get_day_counts(self, title: str, max_days: int = DEFAULT_TREND_MAX_DAYS) -> list[int]:
        """Chronological per-day miss counts for one title."""
        key = self.title(title).prefixed_db_key
        return self.store.daily_counts(key, max_days)

    def get_recent_entries(self, limit: int = 50, offset: int = 0) -> list[MissRecord]:
        """Raw miss events, newest first."""
        return self.store.recent_entries(limit=limit, offset=offset)


def build_service(cfg=None) -> MissedPagesService:
    """Build a service wired from configuration.

    The store uses the configured database path (resolved per connection),
    and a :class:`~missed_pages.editing.MediaWikiApiEditor` is attached when
    ``wiki.api_url`` is set.
    """
    from missed_pages.config import config as default_config
    from missed_pages.editing import MediaWikiApiEditor

    cfg = cfg or default_config
    editor = None
    if cfg.wiki_editing_enabled:
        editor = MediaWikiApiEditor(
            api_url=cfg.wiki.api_url,
            username=cfg.wiki.username,
            password=cfg.wiki.password,
            timeout_seconds=cfg.wiki.timeout_seconds,
        )
    return MissedPagesService(
        LedgerStore(),
        editor=editor,
        redirect_comment=cfg.wiki.redirect_comment,
        namespaces=cfg.wiki.namespaces,
    )
