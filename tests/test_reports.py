"""Tests for report projections."""

from unittest.mock import MagicMock

import pytest

from missed_pages import reports
from missed_pages.service import MissedPagesService


@pytest.mark.db
def test_top_missed_rows_carry_display_title_and_trend(service, clock):
    service.record_missing_page("user talk:alice")
    clock.advance(days=1)
    service.record_missing_page("User talk:Alice")
    service.record_missing_page("Other")

    rows = reports.top_missed(service)

    assert [row.title for row in rows] == ["User_talk:Alice", "Other"]
    first = rows[0]
    assert first.display_title == "User talk:Alice"
    assert first.count == 2
    assert first.day_counts == [1, 1]
    assert (first.trend.total, first.trend.days) == (2, 2)


@pytest.mark.db
def test_top_missed_without_trend_skips_day_counts(service):
    service.record_missing_page("Foo")

    rows = reports.top_missed(service, with_trend=False)

    assert rows[0].day_counts == []
    assert rows[0].trend.total == 0


@pytest.mark.db
def test_top_missed_respects_limit(service):
    for name in ("A", "B", "C"):
        service.record_missing_page(name)

    assert len(reports.top_missed(service, 2)) == 2


@pytest.mark.db
def test_top_ignored(service):
    service.ignore("Spam_page")

    rows = reports.top_ignored(service)

    assert len(rows) == 1
    assert rows[0].display_title == "Spam page"
    assert rows[0].count == 1
    assert rows[0].day_counts == []


@pytest.mark.db
def test_daily_trend_summary(service, clock):
    for _ in range(2):
        service.record_missing_page("Foo")
    clock.advance(days=3)
    service.record_missing_page("Foo")

    counts, summary = reports.daily_trend(service, "foo")

    assert counts == [2, 1]
    assert summary == reports.TrendSummary(total=3, days=2)


@pytest.mark.unit
def test_trend_summary_of_empty_counts():
    assert reports.TrendSummary.from_counts([]) == reports.TrendSummary(total=0, days=0)


@pytest.mark.db
def test_display_titles_use_the_service_namespaces(store, clock):
    service = MissedPagesService(store, namespaces=[], clock=clock)
    service.record_missing_page("Talk:foo")
    service.ignore("Help:bar")

    [missed] = reports.top_missed(service, with_trend=False)
    [ignored] = reports.top_ignored(service)

    assert (missed.title, missed.display_title) == ("Talk:foo", "Talk:foo")
    assert ignored.display_title == "Help:bar"


@pytest.mark.unit
def test_display_title_falls_back_for_unparseable_keys():
    service = MissedPagesService(MagicMock(), namespaces=[])
    assert service.display_title("Bad|key_here") == "Bad|key here"
