"""Missed Pages: a ledger of wiki pages that were requested but not found.

Every request for a page that does not exist is recorded against the page's
canonical title. Privileged users can review aggregate miss counts and
resolve entries by deleting them, ignoring the title permanently, or turning
the missing page into a redirect to an existing one.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ---------------------------------------------------------------------------
# Package version, read from pyproject.toml via importlib.metadata.
#
# If the package is imported without being installed (for example straight
# from a source checkout) we fall back to the last released version.
# ---------------------------------------------------------------------------
try:
    __version__: str = version("missed_pages")
except PackageNotFoundError:
    __version__ = "0.3.0"
