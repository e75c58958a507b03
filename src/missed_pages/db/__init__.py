"""SQLite persistence for the missed-pages ledger."""
