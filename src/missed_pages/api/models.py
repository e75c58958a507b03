"""
Pydantic models for API requests and responses.

Models are organized into two categories:
1. Request models: Data sent FROM the client TO the server
2. Response models: Data sent FROM the server TO the client
"""

from datetime import datetime

from pydantic import BaseModel, Field

# ============================================================================
# REQUEST MODELS (Client → Server)
# ============================================================================


class TitleRequest(BaseModel):
    """
    Request naming one page title.

    Used by the not-found hook endpoint and by the ignore/delete actions.

    Attributes:
        title: Page title as typed or requested (normalized server-side)
    """

    title: str = Field(min_length=1)


class RedirectRequest(BaseModel):
    """
    Request to turn a missed page into a redirect.

    Attributes:
        title: Missing page to create as a redirect
        target: Existing page the redirect points at
    """

    title: str = Field(min_length=1)
    target: str = Field(min_length=1)


# ============================================================================
# RESPONSE MODELS (Server → Client)
# ============================================================================


class TrendSummaryModel(BaseModel):
    """Totals behind a trend line."""

    total: int
    days: int


class MissedPageEntry(BaseModel):
    """One row of a missed or ignored pages report."""

    title: str
    display_title: str
    count: int
    day_counts: list[int] = []
    trend: TrendSummaryModel | None = None


class MissedPagesResponse(BaseModel):
    """Most-missed titles."""

    entries: list[MissedPageEntry]
    limit: int


class IgnoredPagesResponse(BaseModel):
    """Ignored titles."""

    entries: list[MissedPageEntry]


class RecentMissEntry(BaseModel):
    """One raw miss event."""

    id: int
    timestamp: datetime
    title: str


class RecentMissesResponse(BaseModel):
    """Raw miss events, newest first."""

    entries: list[RecentMissEntry]
    limit: int
    offset: int


class DayCountsResponse(BaseModel):
    """Per-day miss counts for one title."""

    title: str
    day_counts: list[int]
    trend: TrendSummaryModel


class RecordMissResponse(BaseModel):
    """Result of the not-found hook endpoint."""

    recorded: bool


class ActionResponse(BaseModel):
    """Result of an administrative action."""

    success: bool
    message: str
    title: str
    removed: int | None = None
