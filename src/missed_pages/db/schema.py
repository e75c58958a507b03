"""Schema creation for the missed-pages SQLite backend.

The ledger lives in a single table. ``ensure_schema`` is idempotent and is
meant to run once at startup (CLI ``init-db``, server boot, or the host
wiki's schema-update hook).
"""

from __future__ import annotations

from missed_pages.db.connection import ConnectionFactory, connection_scope
from missed_pages.db.errors import StorageOperationContext, StorageWriteError

TABLE_NAME = "missed_pages"

CREATE_TABLE_STATEMENT = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        mp_id INTEGER PRIMARY KEY AUTOINCREMENT,
        mp_datetime TIMESTAMP NOT NULL,          -- UTC, 'YYYY-MM-DD HH:MM:SS'
        mp_page_title TEXT NOT NULL,             -- canonical prefixed DB key
        mp_ignore INTEGER NOT NULL DEFAULT 0     -- 1 = ignore marker, not an event
    )
"""

# Grouping and the "is this title ignored" check both filter on
# (title, ignore); day counts additionally scan by datetime within a title.
INDEX_STATEMENTS = (
    (
        f"CREATE INDEX IF NOT EXISTS idx_{TABLE_NAME}_title_ignore "
        f"ON {TABLE_NAME}(mp_page_title, mp_ignore)"
    ),
    (
        f"CREATE INDEX IF NOT EXISTS idx_{TABLE_NAME}_ignore_datetime "
        f"ON {TABLE_NAME}(mp_ignore, mp_datetime)"
    ),
)


def ensure_schema(connect: ConnectionFactory | None = None) -> None:
    """Create the ledger table and its indexes when they do not exist yet.

    Raises:
        StorageWriteError: The database could not be opened or altered.
    """
    try:
        with connection_scope(connect, write=True) as conn:
            conn.execute(CREATE_TABLE_STATEMENT)
            for statement in INDEX_STATEMENTS:
                conn.execute(statement)
    except Exception as exc:
        raise StorageWriteError(
            context=StorageOperationContext(operation="schema.ensure_schema"),
            cause=exc,
        ) from exc
