"""Canonical page titles.

The ledger aggregates on the *prefixed DB key* of a title, the same key the
host wiki stores in its page table: namespace prefix in canonical spelling,
first letter of the page name upper-cased, spaces written as underscores.
Normalizing every title through :class:`Title` before it reaches the store
keeps ``"main page"``, ``"Main_page"`` and ``" Main  page "`` on one row.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

# Characters the host wiki never allows in a page title.
_ILLEGAL_CHARS = re.compile(r"[#<>\[\]|{}\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"[ _\s]+")
_RELATIVE_PATH = re.compile(r"(^|/)\.{1,2}(/|$)")

MAX_TITLE_BYTES = 255


class InvalidTitle(ValueError):
    """A title string could not be normalized into a valid page title."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"Invalid title {text!r}: {reason}")
        self.text = text
        self.reason = reason


def _upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


@dataclass(slots=True, frozen=True)
class Title:
    """A normalized page title.

    Attributes:
        namespace: Canonical namespace name, empty for the main namespace.
        text: Page name without the namespace, with spaces.
    """

    namespace: str
    text: str

    @classmethod
    def from_text(cls, raw: str, *, namespaces: Iterable[str] | None = None) -> Title:
        """Normalize user or request input into a title.

        Args:
            raw: Title as typed, linked or requested.
            namespaces: Recognised namespace names. Defaults to the configured
                ``wiki.namespaces`` list.

        Raises:
            InvalidTitle: The input is empty, too long, or contains
                characters a page title cannot hold.
        """
        if namespaces is None:
            from missed_pages.config import config

            namespaces = config.wiki.namespaces

        if not isinstance(raw, str):
            raise InvalidTitle(str(raw), "title must be a string")

        # Before whitespace folding, which would turn tabs and newlines into spaces.
        if _ILLEGAL_CHARS.search(raw):
            raise InvalidTitle(raw, "title contains illegal characters")

        cleaned = _WHITESPACE.sub(" ", raw).strip()
        if cleaned.startswith(":"):
            cleaned = cleaned[1:].lstrip()
        if not cleaned:
            raise InvalidTitle(raw, "title is empty")

        namespace = ""
        text = cleaned
        if ":" in cleaned:
            prefix, rest = cleaned.split(":", 1)
            lookup = {ns.lower(): ns for ns in namespaces}
            canonical = lookup.get(prefix.strip().lower())
            if canonical is not None:
                namespace = canonical
                text = rest.strip()
                if not text:
                    raise InvalidTitle(raw, "title has a namespace but no page name")

        if _RELATIVE_PATH.search(text):
            raise InvalidTitle(raw, "title contains a relative path segment")

        title = cls(namespace=namespace, text=_upper_first(text))
        # The limit covers the page name only, not the namespace prefix.
        if len(title.db_key.encode("utf-8")) > MAX_TITLE_BYTES:
            raise InvalidTitle(raw, f"page name is longer than {MAX_TITLE_BYTES} bytes")
        return title

    @classmethod
    def from_db_key(cls, key: str, *, namespaces: Iterable[str] | None = None) -> Title:
        """Rebuild a title from a stored prefixed DB key."""
        return cls.from_text(key.replace("_", " "), namespaces=namespaces)

    @property
    def db_key(self) -> str:
        """Page name without the namespace, with underscores."""
        return self.text.replace(" ", "_")

    @property
    def prefixed_text(self) -> str:
        """Display form, for example ``Talk:Foo bar``."""
        if self.namespace:
            return f"{self.namespace}:{self.text}"
        return self.text

    @property
    def prefixed_db_key(self) -> str:
        """Aggregation key, for example ``Talk:Foo_bar``."""
        return self.prefixed_text.replace(" ", "_")

    def __str__(self) -> str:
        return self.prefixed_text
