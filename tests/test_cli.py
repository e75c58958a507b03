"""
Unit tests for CLI module (missed_pages/cli.py).

Tests cover:
- Command parsing and the no-command help path
- init-db against a temporary database
- record / list / ignored / recent / trend output
- ignore / delete / redirect actions and their error exits
"""

import argparse
from unittest.mock import patch

import pytest

from missed_pages import cli
from missed_pages.db.errors import StorageOperationContext, StorageWriteError
from missed_pages.db.ledger_repo import LedgerStore

# ============================================================================
# INIT-DB COMMAND TESTS
# ============================================================================


@pytest.mark.db
def test_cmd_init_db_success(temp_db_path, capsys):
    result = cli.cmd_init_db(argparse.Namespace())

    assert result == 0
    assert temp_db_path.exists()
    assert "Database initialized" in capsys.readouterr().out
    assert LedgerStore().count_where("Anything", ignored=False) == 0


@pytest.mark.unit
def test_cmd_init_db_error(temp_db_path, capsys):
    error = StorageWriteError(context=StorageOperationContext("schema.ensure_schema"))
    with patch("missed_pages.db.schema.ensure_schema", side_effect=error):
        result = cli.cmd_init_db(argparse.Namespace())

    assert result == 1
    assert "Error initializing database" in capsys.readouterr().err


# ============================================================================
# MAIN / PARSING TESTS
# ============================================================================


@pytest.mark.unit
def test_main_no_command(capsys):
    assert cli.main([]) == 0
    assert "usage: missed-pages" in capsys.readouterr().out


@pytest.mark.unit
def test_main_dispatches_run():
    with patch("missed_pages.api.server.run") as mock_run:
        assert cli.main(["run", "--host", "0.0.0.0", "--port", "9000"]) == 0
    mock_run.assert_called_once_with(host="0.0.0.0", port=9000)


# ============================================================================
# REPORT COMMAND TESTS
# ============================================================================


@pytest.mark.db
def test_record_and_list(test_db, capsys):
    assert cli.main(["record", "some page"]) == 0
    assert cli.main(["record", "Some_page"]) == 0
    assert cli.main(["record", "Other"]) == 0
    capsys.readouterr()

    assert cli.main(["list", "--trend"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["2", "Some", "page", "(2", "over", "1", "days)"]
    assert lines[1].split() == ["1", "Other", "(1", "over", "1", "days)"]


@pytest.mark.db
def test_list_empty(test_db, capsys):
    assert cli.main(["list"]) == 0
    assert "No missed pages." in capsys.readouterr().out


@pytest.mark.db
def test_record_invalid_title(test_db, capsys):
    assert cli.main(["record", "bad|title"]) == 1
    assert "Error:" in capsys.readouterr().err


@pytest.mark.db
def test_ignore_then_record(test_db, capsys):
    assert cli.main(["ignore", "Spam"]) == 0
    assert cli.main(["record", "Spam"]) == 0

    out = capsys.readouterr().out
    assert "Ignoring 'Spam'." in out
    assert "Title is ignored; nothing recorded." in out

    assert cli.main(["ignored"]) == 0
    assert capsys.readouterr().out.strip() == "Spam"


@pytest.mark.db
def test_ignored_empty(test_db, capsys):
    assert cli.main(["ignored"]) == 0
    assert "No ignored pages." in capsys.readouterr().out


@pytest.mark.db
def test_delete(test_db, capsys):
    cli.main(["record", "Gone"])
    cli.main(["record", "Gone"])

    assert cli.main(["delete", "Gone"]) == 0
    assert "Deleted 2 log entries for 'Gone'." in capsys.readouterr().out


@pytest.mark.db
def test_recent_and_trend(service, capsys):
    service.record_missing_page("Foo")
    service.record_missing_page("Foo")

    assert cli.main(["recent", "--limit", "1"]) == 0
    recent = capsys.readouterr().out.splitlines()
    assert len(recent) == 1
    assert recent[0].endswith("Foo")
    assert "2018-12-01 12:00:00" in recent[0]

    assert cli.main(["trend", "foo"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["2", "2 misses over 1 days"]


@pytest.mark.db
def test_trend_rejects_bad_max_days(test_db, capsys):
    assert cli.main(["trend", "Foo", "--max-days", "0"]) == 1
    assert "Error:" in capsys.readouterr().err


# ============================================================================
# REDIRECT COMMAND TESTS
# ============================================================================


@pytest.mark.db
def test_redirect_without_wiki_editing(test_db, capsys):
    assert cli.main(["redirect", "Colour", "Color", "--editor", "Alice"]) == 1
    assert "Wiki editing is not configured" in capsys.readouterr().err


@pytest.mark.db
def test_redirect_with_editor(service, wiki_editor, capsys):
    service.record_missing_page("Colour")

    with patch.object(cli, "_service", return_value=service):
        result = cli.main(["redirect", "Colour", "Color", "--editor", "Alice"])

    assert result == 0
    assert "Redirected 'Colour' to 'Color'." in capsys.readouterr().out
    assert wiki_editor.history[0]["editor"] == "Alice"
    assert service.get_log_entries() == []


@pytest.mark.db
def test_redirect_to_itself_fails(service, capsys):
    with patch.object(cli, "_service", return_value=service):
        result = cli.main(["redirect", "Colour", "colour", "--editor", "Alice"])

    assert result == 1
    assert "Error:" in capsys.readouterr().err
