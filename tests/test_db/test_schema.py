"""Tests for ledger schema creation."""

from unittest.mock import patch

import pytest

from missed_pages.db import connection as db_connection
from missed_pages.db.connection import get_connection
from missed_pages.db.errors import StorageWriteError
from missed_pages.db.schema import TABLE_NAME, ensure_schema


@pytest.mark.db
def test_ensure_schema_creates_table_and_indexes(temp_db_path):
    ensure_schema()

    conn = get_connection()
    try:
        table = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (TABLE_NAME,)
        ).fetchone()
        columns = {row[1] for row in conn.execute(f"PRAGMA table_info({TABLE_NAME})")}
        indexes = {row[1] for row in conn.execute(f"PRAGMA index_list({TABLE_NAME})")}
    finally:
        conn.close()

    assert table is not None
    assert columns == {"mp_id", "mp_datetime", "mp_page_title", "mp_ignore"}
    assert "idx_missed_pages_title_ignore" in indexes


@pytest.mark.db
def test_ensure_schema_is_idempotent(temp_db_path, store):
    store.insert("Foo")
    ensure_schema()

    assert store.count_where("Foo", ignored=False) == 1


@pytest.mark.db
def test_ignore_column_defaults_to_event(test_db):
    conn = get_connection()
    try:
        conn.execute(
            f"INSERT INTO {TABLE_NAME} (mp_datetime, mp_page_title) "
            "VALUES ('2020-01-01 00:00:00', 'Foo')"
        )
        flag = conn.execute(f"SELECT mp_ignore FROM {TABLE_NAME}").fetchone()[0]
    finally:
        conn.close()

    assert flag == 0


@pytest.mark.unit
def test_ensure_schema_raises_typed_error():
    with patch.object(db_connection, "get_connection", side_effect=Exception("no disk")):
        with pytest.raises(StorageWriteError):
            ensure_schema()
