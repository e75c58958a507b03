"""
Shared pytest fixtures for the missed-pages test suite.

This module provides fixtures that are automatically available to all test files:
- Temporary test databases wired through ``use_test_database``
- A ledger service with a controllable clock and an in-memory wiki editor
- FastAPI TestClient instances and actor headers for each wiki role

Fixtures are function-scoped so every test gets an isolated database.
"""

import shutil
import tempfile
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from missed_pages.config import DEFAULT_NAMESPACES, use_test_database
from missed_pages.db.ledger_repo import LedgerStore
from missed_pages.db.schema import ensure_schema
from missed_pages.editing import InMemoryContentEditor
from missed_pages.service import MissedPagesService

# ============================================================================
# CLOCK
# ============================================================================


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2018, 12, 1, 12, 0, 0, tzinfo=UTC))


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[Path, None, None]:
    """
    Create a temporary database file for testing.

    Uses the config system's ``use_test_database`` helper so code that
    resolves the database path from configuration sees the temporary file.

    Yields:
        Path to temporary database file
    """
    temp_dir = tempfile.mkdtemp()
    temp_db = Path(temp_dir) / "test_missed_pages.db"

    with use_test_database(temp_db):
        yield temp_db

    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(scope="function")
def test_db(temp_db_path: Path) -> Generator[None, None, None]:
    """Initialize the ledger schema in the temporary database."""
    ensure_schema()
    yield


@pytest.fixture
def store(test_db) -> LedgerStore:
    """Ledger store against the temporary database."""
    return LedgerStore()


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def wiki_editor() -> InMemoryContentEditor:
    return InMemoryContentEditor()


@pytest.fixture
def service(store: LedgerStore, wiki_editor: InMemoryContentEditor, clock) -> MissedPagesService:
    """Service with a frozen clock and an in-memory wiki editor."""
    return MissedPagesService(
        store,
        editor=wiki_editor,
        namespaces=DEFAULT_NAMESPACES,
        clock=clock,
    )


# ============================================================================
# FASTAPI TEST CLIENT FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def test_client(service: MissedPagesService) -> TestClient:
    """
    Create a FastAPI TestClient around the test service.

    Example:
        def test_list(test_client, sysop_headers):
            response = test_client.get("/missed-pages", headers=sysop_headers)
            assert response.status_code == 200
    """
    from missed_pages.api.server import create_app

    app = create_app(service, init_schema=False)
    return TestClient(app)


def _headers(user: str, role: str) -> dict[str, str]:
    return {"X-Wiki-User": user, "X-Wiki-Role": role}


@pytest.fixture
def reader_headers() -> dict[str, str]:
    return _headers("Reader", "reader")


@pytest.fixture
def editor_headers() -> dict[str, str]:
    return _headers("Editor", "editor")


@pytest.fixture
def sysop_headers() -> dict[str, str]:
    return _headers("Sysop", "sysop")
