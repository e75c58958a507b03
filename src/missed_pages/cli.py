"""
Command-line interface for the missed-pages ledger.

Provides CLI commands for operators:
- init-db: Create the ledger table
- record: Record a miss for a title (what the not-found hook does)
- list / ignored / recent / trend: Reports
- ignore / delete / redirect: Remediation actions
- run: Start the HTTP API

Usage:
    missed-pages init-db
    missed-pages list [--limit N]
    missed-pages trend "Some page" [--max-days N]
    missed-pages redirect "Missing page" "Existing page" --editor Alice
    missed-pages run [--host HOST] [--port PORT]

Environment Variables:
    MISSED_PAGES_DB_PATH: Database file (default: data/missed_pages.db)
    MISSED_PAGES_LOG_LEVEL: Log level (default: INFO)
    MISSED_PAGES_WIKI_API_URL: Wiki api.php URL used by redirect
    MISSED_PAGES_WIKI_USERNAME / MISSED_PAGES_WIKI_PASSWORD: Bot credentials
"""

import argparse
import logging
import sys

LOG_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
}


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Apply the configured log level and format to the root logger."""
    from missed_pages.config import config

    logging.basicConfig(
        level=(level or config.logging.level).upper(),
        format=LOG_FORMATS.get(fmt or config.logging.format, LOG_FORMATS["detailed"]),
    )


def _service():
    from missed_pages.service import build_service

    return build_service()


def cmd_init_db(args: argparse.Namespace) -> int:
    """
    Create the ledger table.

    Returns:
        0 on success, 1 on error
    """
    from missed_pages.config import config
    from missed_pages.db.schema import ensure_schema

    try:
        config.database.absolute_path.parent.mkdir(parents=True, exist_ok=True)
        ensure_schema()
        print(f"Database initialized at {config.database.absolute_path}.")
        return 0
    except Exception as e:
        print(f"Error initializing database: {e}", file=sys.stderr)
        return 1


def cmd_record(args: argparse.Namespace) -> int:
    """Record one miss for a title, like the not-found hook does."""
    from missed_pages.db.errors import StorageUnavailable
    from missed_pages.titles import InvalidTitle

    try:
        recorded = _service().record_missing_page(args.title)
    except (InvalidTitle, StorageUnavailable) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print("Recorded." if recorded else "Title is ignored; nothing recorded.")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Print the most-missed titles."""
    from missed_pages import reports
    from missed_pages.db.errors import StorageUnavailable

    try:
        rows = reports.top_missed(_service(), args.limit, with_trend=args.trend)
    except StorageUnavailable as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not rows:
        print("No missed pages.")
        return 0
    for row in rows:
        line = f"{row.count:>7}  {row.display_title}"
        if args.trend:
            line += f"  ({row.trend.total} over {row.trend.days} days)"
        print(line)
    return 0


def cmd_ignored(args: argparse.Namespace) -> int:
    """Print ignored titles."""
    from missed_pages import reports
    from missed_pages.db.errors import StorageUnavailable

    try:
        rows = reports.top_ignored(_service())
    except StorageUnavailable as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not rows:
        print("No ignored pages.")
        return 0
    for row in rows:
        print(row.display_title)
    return 0


def cmd_recent(args: argparse.Namespace) -> int:
    """Print raw miss events, newest first."""
    from missed_pages.db.errors import StorageUnavailable

    try:
        records = _service().get_recent_entries(limit=args.limit, offset=args.offset)
    except (StorageUnavailable, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for record in records:
        print(f"{record.id:>7}  {record.timestamp:%Y-%m-%d %H:%M:%S}  {record.page_title}")
    return 0


def cmd_trend(args: argparse.Namespace) -> int:
    """Print per-day miss counts for one title."""
    from missed_pages import reports
    from missed_pages.db.errors import StorageUnavailable
    from missed_pages.titles import InvalidTitle

    try:
        counts, summary = reports.daily_trend(_service(), args.title, args.max_days)
    except (InvalidTitle, StorageUnavailable, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(" ".join(str(count) for count in counts) or "-")
    print(f"{summary.total} misses over {summary.days} days")
    return 0


def cmd_ignore(args: argparse.Namespace) -> int:
    """Ignore a title."""
    from missed_pages.db.errors import StorageUnavailable
    from missed_pages.titles import InvalidTitle

    try:
        _service().ignore(args.title)
    except (InvalidTitle, StorageUnavailable) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Ignoring '{args.title}'.")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Clear a title from the log."""
    from missed_pages.db.errors import StorageUnavailable
    from missed_pages.titles import InvalidTitle

    try:
        removed = _service().delete(args.title)
    except (InvalidTitle, StorageUnavailable) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Deleted {removed} log entries for '{args.title}'.")
    return 0


def cmd_redirect(args: argparse.Namespace) -> int:
    """Redirect a missed page to an existing page and clear it from the log."""
    from missed_pages.db.errors import StorageUnavailable
    from missed_pages.editing import EditError
    from missed_pages.titles import InvalidTitle

    service = _service()
    if service.editor is None:
        print(
            "Error: Wiki editing is not configured.\n"
            "Set MISSED_PAGES_WIKI_API_URL (and bot credentials).",
            file=sys.stderr,
        )
        return 1

    try:
        source = service.redirect(args.source, args.target, args.editor)
    except (InvalidTitle, EditError, StorageUnavailable) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Redirected '{source.prefixed_text}' to '{args.target}'.")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Start the HTTP API."""
    from missed_pages.api.server import run

    try:
        run(host=args.host, port=args.port)
    except KeyboardInterrupt:
        return 0
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    from missed_pages.config import config

    parser = argparse.ArgumentParser(
        prog="missed-pages",
        description="Missed Pages - log and resolve requests for pages that do not exist",
    )
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init-db", help="Create the ledger table")
    init_parser.set_defaults(func=cmd_init_db)

    record_parser = subparsers.add_parser("record", help="Record a miss for a title")
    record_parser.add_argument("title")
    record_parser.set_defaults(func=cmd_record)

    list_parser = subparsers.add_parser("list", help="Show the most-missed titles")
    list_parser.add_argument("--limit", "-n", type=int, default=config.ledger.log_limit)
    list_parser.add_argument(
        "--trend", action="store_true", help="Include per-title totals over days"
    )
    list_parser.set_defaults(func=cmd_list)

    ignored_parser = subparsers.add_parser("ignored", help="Show ignored titles")
    ignored_parser.set_defaults(func=cmd_ignored)

    recent_parser = subparsers.add_parser("recent", help="Show raw miss events")
    recent_parser.add_argument("--limit", "-n", type=int, default=config.ledger.recent_limit)
    recent_parser.add_argument("--offset", type=int, default=0)
    recent_parser.set_defaults(func=cmd_recent)

    trend_parser = subparsers.add_parser("trend", help="Show per-day counts for a title")
    trend_parser.add_argument("title")
    trend_parser.add_argument("--max-days", type=int, default=config.ledger.trend_max_days)
    trend_parser.set_defaults(func=cmd_trend)

    ignore_parser = subparsers.add_parser("ignore", help="Ignore a title permanently")
    ignore_parser.add_argument("title")
    ignore_parser.set_defaults(func=cmd_ignore)

    delete_parser = subparsers.add_parser("delete", help="Clear a title from the log")
    delete_parser.add_argument("title")
    delete_parser.set_defaults(func=cmd_delete)

    redirect_parser = subparsers.add_parser(
        "redirect",
        help="Redirect a missed page to an existing page",
        description=(
            "Create SOURCE as a redirect to TARGET through the wiki API, "
            "then clear SOURCE from the log."
        ),
    )
    redirect_parser.add_argument("source")
    redirect_parser.add_argument("target")
    redirect_parser.add_argument("--editor", required=True, help="User the edit is made for")
    redirect_parser.set_defaults(func=cmd_redirect)

    run_parser = subparsers.add_parser("run", help="Run the HTTP API")
    run_parser.add_argument("--host", type=str, help="Host to bind (default from config)")
    run_parser.add_argument("--port", "-p", type=int, help="Port to bind (default from config)")
    run_parser.set_defaults(func=cmd_run)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
