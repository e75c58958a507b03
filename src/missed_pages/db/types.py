"""Shared DB-layer dataclasses for repository contracts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class MissRecord:
    """
    One row of the ledger.

    Attributes:
        id: Surrogate key assigned by the store.
        timestamp: Creation time (UTC, naive) of the row.
        page_title: Canonical prefixed DB key of the page.
        ignored: True when the row is an ignore marker rather than a miss event.
    """

    id: int
    timestamp: datetime
    page_title: str
    ignored: bool


@dataclass(slots=True, frozen=True)
class TitleCount:
    """
    Aggregated row count for one title.

    Attributes:
        page_title: Canonical prefixed DB key of the page.
        count: Number of matching rows.
    """

    page_title: str
    count: int
