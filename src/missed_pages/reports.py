"""Read-only report projections for presentation layers.

These functions turn service queries into plain dataclasses that an HTML
table, the CLI or the JSON API can render without touching the ledger.
They hold no state of their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from missed_pages.service import DEFAULT_LOG_LIMIT, DEFAULT_TREND_MAX_DAYS, MissedPagesService


@dataclass(slots=True)
class TrendSummary:
    """Totals behind a day-count trend ("N misses over D days")."""

    total: int
    days: int

    @classmethod
    def from_counts(cls, counts: list[int]) -> TrendSummary:
        return cls(total=sum(counts), days=len(counts))


@dataclass(slots=True)
class MissedPageRow:
    """One report row.

    Attributes:
        title: Canonical prefixed DB key.
        display_title: Human-readable form of the title.
        count: Miss events (or ignore markers) for the title.
        day_counts: Chronological per-day counts; empty for ignored rows.
    """

    title: str
    display_title: str
    count: int
    day_counts: list[int] = field(default_factory=list)

    @property
    def trend(self) -> TrendSummary:
        return TrendSummary.from_counts(self.day_counts)


def top_missed(
    service: MissedPagesService,
    limit: int = DEFAULT_LOG_LIMIT,
    *,
    max_days: int = DEFAULT_TREND_MAX_DAYS,
    with_trend: bool = True,
) -> list[MissedPageRow]:
    """Most-missed titles, each with its daily trend."""
    rows = []
    for entry in service.get_log_entries(limit):
        day_counts = service.get_day_counts(entry.page_title, max_days) if with_trend else []
        rows.append(
            MissedPageRow(
                title=entry.page_title,
                display_title=service.display_title(entry.page_title),
                count=entry.count,
                day_counts=day_counts,
            )
        )
    return rows


def top_ignored(service: MissedPagesService) -> list[MissedPageRow]:
    """Ignored titles."""
    return [
        MissedPageRow(
            title=entry.page_title,
            display_title=service.display_title(entry.page_title),
            count=entry.count,
        )
        for entry in service.get_ignored_entries()
    ]


def daily_trend(
    service: MissedPagesService, title: str, max_days: int = DEFAULT_TREND_MAX_DAYS
) -> tuple[list[int], TrendSummary]:
    """Per-day counts for one title together with their summary."""
    counts = service.get_day_counts(title, max_days)
    return counts, TrendSummary.from_counts(counts)
