"""Missed-pages report and action endpoints.

Read endpoints need the VIEW capability; each action needs the capability of
the wiki right it stands in for (ignore → block, delete → delete,
redirect → edit). ``POST /misses`` is the not-found hook endpoint and is
called by the host wiki itself, so it never fails because of the ledger.

Error mapping:
    InvalidTitle        → 400
    EditConflict        → 409
    EditRejected        → 422
    StorageUnavailable  → 503
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Query

from missed_pages import reports
from missed_pages.api.auth import Actor, get_actor, require_capability
from missed_pages.api.models import (
    ActionResponse,
    DayCountsResponse,
    IgnoredPagesResponse,
    MissedPageEntry,
    MissedPagesResponse,
    RecentMissEntry,
    RecentMissesResponse,
    RecordMissResponse,
    RedirectRequest,
    TitleRequest,
    TrendSummaryModel,
)
from missed_pages.api.permissions import Authorizer, Capability
from missed_pages.config import config
from missed_pages.db.errors import StorageUnavailable
from missed_pages.editing import EditConflict, EditRejected
from missed_pages.hooks import on_show_missing_article
from missed_pages.service import MissedPagesService
from missed_pages.titles import InvalidTitle

logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Map ledger and editor failures onto HTTP errors."""
    try:
        yield
    except InvalidTitle as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except EditConflict as exc:
        logger.info("%s refused by wiki (conflict): %s", action, exc)
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except EditRejected as exc:
        logger.info("%s refused by wiki: %s", action, exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StorageUnavailable as exc:
        logger.error("%s failed, ledger store unavailable: %s", action, exc)
        raise HTTPException(status_code=503, detail="Missed pages store unavailable") from exc


def _entry(row: reports.MissedPageRow, *, with_trend: bool) -> MissedPageEntry:
    trend = None
    if with_trend:
        trend = TrendSummaryModel(total=row.trend.total, days=row.trend.days)
    return MissedPageEntry(
        title=row.title,
        display_title=row.display_title,
        count=row.count,
        day_counts=row.day_counts,
        trend=trend,
    )


def router(service: MissedPagesService, authorizer: Authorizer) -> APIRouter:
    """Build the missed-pages router around a service and an authorizer."""
    api = APIRouter()

    # ── Not-found hook ────────────────────────────────────────────────────────

    @api.post("/misses", response_model=RecordMissResponse)
    def record_miss(request: TitleRequest):
        """Record a request for a page that does not exist."""
        return RecordMissResponse(recorded=on_show_missing_article(service, request.title))

    # ── Reports ───────────────────────────────────────────────────────────────

    @api.get("/missed-pages", response_model=MissedPagesResponse)
    def list_missed_pages(
        limit: int = Query(default=config.ledger.log_limit, ge=1, le=1000),
        actor: Actor = Depends(get_actor),
    ):
        """Most-missed titles with their daily trends (Requires VIEW)."""
        require_capability(authorizer, actor, Capability.VIEW)
        with _translate_errors("list missed pages"):
            rows = reports.top_missed(service, limit, max_days=config.ledger.trend_max_days)
        return MissedPagesResponse(
            entries=[_entry(row, with_trend=True) for row in rows],
            limit=limit,
        )

    @api.get("/missed-pages/ignored", response_model=IgnoredPagesResponse)
    def list_ignored_pages(actor: Actor = Depends(get_actor)):
        """Ignored titles (Requires VIEW)."""
        require_capability(authorizer, actor, Capability.VIEW)
        with _translate_errors("list ignored pages"):
            rows = reports.top_ignored(service)
        return IgnoredPagesResponse(entries=[_entry(row, with_trend=False) for row in rows])

    @api.get("/missed-pages/recent", response_model=RecentMissesResponse)
    def list_recent_misses(
        limit: int = Query(default=config.ledger.recent_limit, ge=1, le=500),
        offset: int = Query(default=0, ge=0),
        actor: Actor = Depends(get_actor),
    ):
        """Raw miss events, newest first (Requires VIEW)."""
        require_capability(authorizer, actor, Capability.VIEW)
        with _translate_errors("list recent misses"):
            records = service.get_recent_entries(limit=limit, offset=offset)
        return RecentMissesResponse(
            entries=[
                RecentMissEntry(id=record.id, timestamp=record.timestamp, title=record.page_title)
                for record in records
            ],
            limit=limit,
            offset=offset,
        )

    @api.get("/missed-pages/trend", response_model=DayCountsResponse)
    def get_trend(
        title: str,
        max_days: int = Query(default=config.ledger.trend_max_days, ge=1),
        actor: Actor = Depends(get_actor),
    ):
        """Per-day miss counts for one title (Requires VIEW)."""
        require_capability(authorizer, actor, Capability.VIEW)
        with _translate_errors("get trend"):
            key = service.title(title).prefixed_db_key
            counts, summary = reports.daily_trend(service, key, max_days)
        return DayCountsResponse(
            title=key,
            day_counts=counts,
            trend=TrendSummaryModel(total=summary.total, days=summary.days),
        )

    # ── Actions ───────────────────────────────────────────────────────────────

    @api.post("/missed-pages/ignore", response_model=ActionResponse)
    def ignore_page(request: TitleRequest, actor: Actor = Depends(get_actor)):
        """Ignore a title permanently (Requires BLOCK)."""
        require_capability(authorizer, actor, Capability.BLOCK)
        with _translate_errors("ignore"):
            key = service.title(request.title).prefixed_db_key
            service.ignore(key)
        logger.info("%s ignored %r", actor.name, key)
        return ActionResponse(success=True, message=f"Ignoring {key}", title=key)

    @api.post("/missed-pages/delete", response_model=ActionResponse)
    def delete_page(request: TitleRequest, actor: Actor = Depends(get_actor)):
        """Clear a title from the log (Requires DELETE)."""
        require_capability(authorizer, actor, Capability.DELETE)
        with _translate_errors("delete"):
            key = service.title(request.title).prefixed_db_key
            removed = service.delete(key)
        logger.info("%s deleted %r from the log", actor.name, key)
        return ActionResponse(
            success=True,
            message=f"Deleted {removed} log entries for {key}",
            title=key,
            removed=removed,
        )

    @api.post("/missed-pages/redirect", response_model=ActionResponse)
    def redirect_page(request: RedirectRequest, actor: Actor = Depends(get_actor)):
        """Create a redirect for a missed page and clear it (Requires EDIT)."""
        require_capability(authorizer, actor, Capability.EDIT)
        if service.editor is None:
            raise HTTPException(status_code=503, detail="Wiki editing is not configured")
        with _translate_errors("redirect"):
            source = service.redirect(request.title, request.target, actor.name)
        return ActionResponse(
            success=True,
            message=f"Redirected {source.prefixed_text} to {request.target}",
            title=source.prefixed_db_key,
        )

    return api
