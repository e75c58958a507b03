"""
Service configuration management.

This module loads configuration from multiple sources with a clear priority
order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/missed_pages.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The
MissedPagesConfig dataclass provides typed access to all settings.

Usage:
    from missed_pages.config import config

    print(config.database.absolute_path)
    print(config.ledger.log_limit)

Environment Variable Mapping:
    MISSED_PAGES_HOST             -> server.host
    MISSED_PAGES_PORT             -> server.port
    MISSED_PAGES_DB_PATH          -> database.path
    MISSED_PAGES_LOG_LEVEL        -> logging.level
    MISSED_PAGES_WIKI_API_URL     -> wiki.api_url
    MISSED_PAGES_WIKI_USERNAME    -> wiki.username
    MISSED_PAGES_WIKI_PASSWORD    -> wiki.password
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, data/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "missed_pages.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "missed_pages.example.ini"

# Namespaces recognised by title normalization, in their canonical spelling.
DEFAULT_NAMESPACES = [
    "Talk",
    "User",
    "User talk",
    "Project",
    "Project talk",
    "File",
    "File talk",
    "Template",
    "Template talk",
    "Help",
    "Help talk",
    "Category",
    "Category talk",
]


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ServerSettings:
    """Network server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class DatabaseSettings:
    """Database configuration."""

    path: str = "data/missed_pages.db"

    @property
    def absolute_path(self) -> Path:
        """Get absolute path to database file."""
        p = Path(self.path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class LedgerSettings:
    """Report sizing for the missed-pages ledger."""

    # Arbitrary cap on the main report until it is switched to a paged layout.
    log_limit: int = 100
    trend_max_days: int = 300
    recent_limit: int = 50


@dataclass
class WikiSettings:
    """Host wiki integration used to create redirects."""

    api_url: str = ""
    username: str = ""
    password: str = ""
    redirect_comment: str = "Redirected from the missed pages log"
    timeout_seconds: float = 10.0
    namespaces: list[str] = field(default_factory=lambda: list(DEFAULT_NAMESPACES))


@dataclass
class MissedPagesConfig:
    """
    Complete service configuration.

    Aggregates all settings sections. Access via the module-level `config`
    singleton.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    wiki: WikiSettings = field(default_factory=WikiSettings)

    @property
    def wiki_editing_enabled(self) -> bool:
        """True when enough wiki settings exist to create redirects."""
        return bool(self.wiki.api_url.strip())


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated string to list, stripping whitespace."""
    if not value or value.strip() == "":
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _load_from_ini(parser: configparser.ConfigParser, cfg: MissedPagesConfig) -> None:
    """Copy every option present in ``parser`` onto ``cfg``; absent options keep defaults."""
    if "server" in parser:
        server = parser["server"]
        cfg.server.host = server.get("host", fallback=cfg.server.host)
        cfg.server.port = server.getint("port", fallback=cfg.server.port)

    if "database" in parser:
        cfg.database.path = parser["database"].get("path", fallback=cfg.database.path)

    if "logging" in parser:
        section = parser["logging"]
        cfg.logging.level = section.get("level", fallback=cfg.logging.level).upper()
        log_format = section.get("format", fallback=cfg.logging.format).lower()
        if log_format in ("simple", "detailed"):
            cfg.logging.format = log_format  # type: ignore[assignment]

    if "ledger" in parser:
        ledger = parser["ledger"]
        cfg.ledger.log_limit = ledger.getint("log_limit", fallback=cfg.ledger.log_limit)
        cfg.ledger.trend_max_days = ledger.getint(
            "trend_max_days", fallback=cfg.ledger.trend_max_days
        )
        cfg.ledger.recent_limit = ledger.getint("recent_limit", fallback=cfg.ledger.recent_limit)

    if "wiki" in parser:
        wiki = parser["wiki"]
        cfg.wiki.api_url = wiki.get("api_url", fallback=cfg.wiki.api_url)
        cfg.wiki.username = wiki.get("username", fallback=cfg.wiki.username)
        cfg.wiki.password = wiki.get("password", fallback=cfg.wiki.password)
        cfg.wiki.redirect_comment = wiki.get(
            "redirect_comment", fallback=cfg.wiki.redirect_comment
        )
        cfg.wiki.timeout_seconds = wiki.getfloat(
            "timeout_seconds", fallback=cfg.wiki.timeout_seconds
        )
        if "namespaces" in wiki:
            cfg.wiki.namespaces = _parse_list(wiki["namespaces"])


def _apply_env_overrides(cfg: MissedPagesConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_host := os.getenv("MISSED_PAGES_HOST"):
        cfg.server.host = env_host
    if env_port := os.getenv("MISSED_PAGES_PORT"):
        cfg.server.port = int(env_port)

    if env_db := os.getenv("MISSED_PAGES_DB_PATH"):
        cfg.database.path = env_db

    if env_log := os.getenv("MISSED_PAGES_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()

    if env_api := os.getenv("MISSED_PAGES_WIKI_API_URL"):
        cfg.wiki.api_url = env_api
    if env_user := os.getenv("MISSED_PAGES_WIKI_USERNAME"):
        cfg.wiki.username = env_user
    if env_password := os.getenv("MISSED_PAGES_WIKI_PASSWORD"):
        cfg.wiki.password = env_password


def load_config() -> MissedPagesConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/missed_pages.ini
        3. config/missed_pages.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        MissedPagesConfig: Fully populated configuration object.
    """
    cfg = MissedPagesConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "MissedPagesConfig":
    """
    Reload configuration from disk and environment.

    This updates the module-level `config` singleton.

    Returns:
        MissedPagesConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "database_path": str(config.database.absolute_path),
        "wiki_editing_enabled": config.wiki_editing_enabled,
    }


# =============================================================================
# TEST HELPERS
# =============================================================================


class use_test_database:
    """
    Context manager for using a temporary test database.

    Usage:
        from missed_pages.config import use_test_database

        def test_something(tmp_path):
            with use_test_database(tmp_path / "test.db"):
                ensure_schema()

    Args:
        db_path: Path to the test database file
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self.original_path: str | None = None

    def __enter__(self) -> Path:
        """Set up test database path."""
        self.original_path = config.database.path
        config.database.path = str(self.db_path)
        return self.db_path

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Restore original database path."""
        if self.original_path is not None:
            config.database.path = self.original_path
        return None
