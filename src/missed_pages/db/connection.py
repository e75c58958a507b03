"""SQLite connection primitives for the missed-pages DB layer.

This module owns connection creation and low-level SQLite runtime pragmas so
repository code can stay focused on queries and transaction intent.

Repositories never reach for a global connection: they receive a
``ConnectionFactory`` at construction. :func:`get_connection` is the default
factory and resolves the database path from runtime configuration at call
time, so ``use_test_database`` keeps working for code built on it.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

ConnectionFactory = Callable[[], sqlite3.Connection]


def get_db_path() -> Path:
    """Resolve the absolute SQLite database path from runtime configuration."""
    from missed_pages.config import config

    return config.database.absolute_path


def configure_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """Apply connection-level SQLite pragmas required by the application.

    Notes:
        - ``busy_timeout`` reduces transient lock failures when a not-found
          hook and an administrative action write at the same time.
        - ``isolation_level = None`` leaves transaction boundaries to the
          repository, which issues explicit ``BEGIN`` statements.
    """
    connection.isolation_level = None
    connection.execute("PRAGMA busy_timeout = 5000")
    return connection


def get_connection() -> sqlite3.Connection:
    """Create and configure a new SQLite connection for the configured path."""
    connection = sqlite3.connect(str(get_db_path()))
    return configure_connection(connection)


def connection_factory_for(path: Path | str) -> ConnectionFactory:
    """Return a factory that opens configured connections to ``path``."""

    def _connect() -> sqlite3.Connection:
        return configure_connection(sqlite3.connect(str(path)))

    return _connect


@contextmanager
def connection_scope(
    connect: ConnectionFactory | None = None, *, write: bool = False
) -> Iterator[sqlite3.Connection]:
    """Yield a configured connection with guaranteed cleanup semantics.

    Args:
        connect: Connection factory; defaults to :func:`get_connection`.
        write: When True, wrap the block in ``BEGIN IMMEDIATE`` and commit on
            success or roll back on exceptions.

    Behavior:
        - Always closes the connection in ``finally``.
        - ``BEGIN IMMEDIATE`` takes the write lock up front, so a
          delete-then-insert block is never interleaved with another writer.
    """
    connection = (connect or get_connection)()
    try:
        if write:
            connection.execute("BEGIN IMMEDIATE")
        yield connection
        if write:
            connection.execute("COMMIT")
    except Exception:
        if write and connection.in_transaction:
            try:
                connection.execute("ROLLBACK")
            except sqlite3.Error:
                # Preserve the original exception while best-effort rolling back.
                pass
        raise
    finally:
        connection.close()
