"""Ledger repository operations for the SQLite backend.

``LedgerStore`` owns every query against the ``missed_pages`` table. It works
on canonical title keys only; normalizing user input is the service layer's
job. All failures surface as :class:`~missed_pages.db.errors.StorageUnavailable`
subclasses with the original exception chained.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import NoReturn

from missed_pages.db.connection import ConnectionFactory, connection_scope
from missed_pages.db.errors import (
    DatabaseError,
    StorageOperationContext,
    StorageReadError,
    StorageUnavailable,
    StorageWriteError,
)
from missed_pages.db.schema import TABLE_NAME
from missed_pages.db.types import MissRecord, TitleCount

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _raise_storage_error(
    error_cls: type[StorageUnavailable],
    operation: str,
    exc: Exception,
    *,
    page_title: str | None = None,
    details: str | None = None,
) -> NoReturn:
    """Re-raise ``exc`` as ``error_cls`` unless it already is a DB-layer error."""
    if isinstance(exc, DatabaseError):
        raise exc
    context = StorageOperationContext(operation, page_title=page_title, details=details)
    raise error_cls(context=context, cause=exc) from exc


def format_timestamp(moment: datetime | None) -> str:
    """Render a timestamp in the stored UTC text form."""
    if moment is None:
        moment = datetime.now(UTC)
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC).replace(tzinfo=None)
    return moment.strftime(TIMESTAMP_FORMAT)


class LedgerStore:
    """Persistence and set-based queries over miss records.

    Args:
        connect: Factory returning a configured SQLite connection. ``None``
            uses :func:`missed_pages.db.connection.get_connection`, resolved
            on every call.
    """

    def __init__(self, connect: ConnectionFactory | None = None) -> None:
        self._connect = connect

    @property
    def connect(self) -> ConnectionFactory | None:
        """Connection factory this store was built with."""
        return self._connect

    # ── Mutations ─────────────────────────────────────────────────────────────

    def insert(
        self,
        page_title: str,
        *,
        ignored: bool = False,
        timestamp: datetime | None = None,
    ) -> int:
        """Append one row and return its id."""
        try:
            with connection_scope(self._connect, write=True) as conn:
                cursor = conn.execute(
                    f"""
                    INSERT INTO {TABLE_NAME} (mp_datetime, mp_page_title, mp_ignore)
                    VALUES (?, ?, ?)
                    """,  # nosec B608
                    (format_timestamp(timestamp), page_title, int(ignored)),
                )
                row_id = cursor.lastrowid
            if row_id is None:
                raise ValueError("Failed to insert missed page row.")
            return int(row_id)
        except Exception as exc:
            _raise_storage_error(
                StorageWriteError,
                "ledger.insert",
                exc,
                page_title=page_title,
                details=f"ignored={ignored!r}",
            )

    def delete_where(self, page_title: str) -> int:
        """Delete every row (events and ignore marker) for a title.

        Returns:
            Number of rows removed; zero is not an error.
        """
        try:
            with connection_scope(self._connect, write=True) as conn:
                cursor = conn.execute(
                    f"DELETE FROM {TABLE_NAME} WHERE mp_page_title = ?",  # nosec B608
                    (page_title,),
                )
                return cursor.rowcount
        except Exception as exc:
            _raise_storage_error(
                StorageWriteError, "ledger.delete_where", exc, page_title=page_title
            )

    def replace_with_ignore_marker(
        self, page_title: str, *, timestamp: datetime | None = None
    ) -> int:
        """Purge a title's rows and insert a single ignore marker atomically.

        Both statements run in one ``BEGIN IMMEDIATE`` transaction, so readers
        see either the previous rows or the marker, never neither.

        Returns:
            Id of the new marker row.
        """
        try:
            with connection_scope(self._connect, write=True) as conn:
                conn.execute(
                    f"DELETE FROM {TABLE_NAME} WHERE mp_page_title = ?",  # nosec B608
                    (page_title,),
                )
                cursor = conn.execute(
                    f"""
                    INSERT INTO {TABLE_NAME} (mp_datetime, mp_page_title, mp_ignore)
                    VALUES (?, ?, 1)
                    """,  # nosec B608
                    (format_timestamp(timestamp), page_title),
                )
                row_id = cursor.lastrowid
            if row_id is None:
                raise ValueError("Failed to insert ignore marker.")
            return int(row_id)
        except Exception as exc:
            _raise_storage_error(
                StorageWriteError,
                "ledger.replace_with_ignore_marker",
                exc,
                page_title=page_title,
            )

    # ── Queries ───────────────────────────────────────────────────────────────

    def count_where(self, page_title: str, *, ignored: bool) -> int:
        """Count rows for a title with the given ignore flag."""
        try:
            with connection_scope(self._connect) as conn:
                row = conn.execute(
                    f"""
                    SELECT COUNT(*) FROM {TABLE_NAME}
                    WHERE mp_page_title = ? AND mp_ignore = ?
                    """,  # nosec B608
                    (page_title, int(ignored)),
                ).fetchone()
            return int(row[0]) if row else 0
        except Exception as exc:
            _raise_storage_error(
                StorageReadError,
                "ledger.count_where",
                exc,
                page_title=page_title,
                details=f"ignored={ignored!r}",
            )

    def grouped_counts(self, *, ignored: bool, limit: int | None = None) -> list[TitleCount]:
        """Return per-title row counts, most frequent first.

        Ties are broken by title so results are deterministic.

        Args:
            ignored: Select ignore markers (True) or miss events (False).
            limit: Optional maximum number of titles to return.

        Raises:
            ValueError: If ``limit`` is given and smaller than 1.
        """
        if limit is not None and limit < 1:
            raise ValueError("limit must be >= 1")

        query = f"""
            SELECT mp_page_title, COUNT(mp_id) AS hits
            FROM {TABLE_NAME}
            WHERE mp_ignore = ?
            GROUP BY mp_page_title
            ORDER BY hits DESC, mp_page_title ASC
        """  # nosec B608
        params: tuple[int, ...] = (int(ignored),)
        if limit is not None:
            query += " LIMIT ?"
            params = (int(ignored), limit)

        try:
            with connection_scope(self._connect) as conn:
                rows = conn.execute(query, params).fetchall()
        except Exception as exc:
            _raise_storage_error(
                StorageReadError,
                "ledger.grouped_counts",
                exc,
                details=f"ignored={ignored!r}, limit={limit!r}",
            )
        return [TitleCount(page_title=title, count=int(hits)) for title, hits in rows]

    def daily_counts(self, page_title: str, max_days: int) -> list[int]:
        """Return miss counts per calendar day for one title.

        Only miss events are counted. Days without events are skipped, the
        result keeps the most recent ``max_days`` days and is ordered oldest
        first.

        Raises:
            ValueError: If ``max_days`` is smaller than 1.
        """
        if max_days < 1:
            raise ValueError("max_days must be >= 1")

        try:
            with connection_scope(self._connect) as conn:
                rows = conn.execute(
                    f"""
                    SELECT day, hits FROM (
                        SELECT date(mp_datetime) AS day, COUNT(mp_id) AS hits
                        FROM {TABLE_NAME}
                        WHERE mp_ignore = 0 AND mp_page_title = ?
                        GROUP BY day
                        ORDER BY day DESC
                        LIMIT ?
                    )
                    ORDER BY day ASC
                    """,  # nosec B608
                    (page_title, max_days),
                ).fetchall()
        except Exception as exc:
            _raise_storage_error(
                StorageReadError,
                "ledger.daily_counts",
                exc,
                page_title=page_title,
                details=f"max_days={max_days}",
            )
        return [int(hits) for _day, hits in rows]

    def recent_entries(self, *, limit: int, offset: int = 0) -> list[MissRecord]:
        """Return raw miss events, newest first, one page at a time.

        Raises:
            ValueError: If ``limit`` < 1 or ``offset`` < 0.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        try:
            with connection_scope(self._connect) as conn:
                rows = conn.execute(
                    f"""
                    SELECT mp_id, mp_datetime, mp_page_title, mp_ignore
                    FROM {TABLE_NAME}
                    WHERE mp_ignore = 0
                    ORDER BY mp_datetime DESC, mp_id DESC
                    LIMIT ? OFFSET ?
                    """,  # nosec B608
                    (limit, offset),
                ).fetchall()
        except Exception as exc:
            _raise_storage_error(
                StorageReadError,
                "ledger.recent_entries",
                exc,
                details=f"limit={limit}, offset={offset}",
            )
        return [
            MissRecord(
                id=int(row_id),
                timestamp=datetime.strptime(stamp, TIMESTAMP_FORMAT),
                page_title=title,
                ignored=bool(flag),
            )
            for row_id, stamp, title, flag in rows
        ]
