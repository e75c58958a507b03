"""Tests for version management.

Verifies that ``missed_pages.__version__`` is resolved from the installed
package metadata (``pyproject.toml``) and that the FastAPI OpenAPI schema and
the root ``/`` endpoint report the same value.
"""

from __future__ import annotations

import re

import pytest
from fastapi.testclient import TestClient

import missed_pages

# Matches semver-ish strings: major.minor.patch with optional pre-release
# suffix (e.g. "0.3.0", "1.0.0-rc.1").
_SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+" r"(-[A-Za-z0-9]+(\.[A-Za-z0-9]+)*)?$")


@pytest.mark.unit
class TestVersionAttribute:
    """Verify the ``missed_pages.__version__`` package attribute."""

    def test_version_is_a_string(self) -> None:
        assert isinstance(missed_pages.__version__, str)
        assert len(missed_pages.__version__) > 0

    def test_version_matches_semver(self) -> None:
        assert _SEMVER_RE.match(missed_pages.__version__), (
            f"__version__ {missed_pages.__version__!r} does not match "
            f"expected semver pattern (major.minor.patch[-prerelease])"
        )


@pytest.mark.api
class TestVersionInApp:
    """Verify version consistency across the FastAPI app surfaces."""

    def test_openapi_version_matches_package(self, service) -> None:
        from missed_pages.api.server import create_app

        app = create_app(service, init_schema=False)
        assert app.version == missed_pages.__version__

    def test_root_endpoint_version_matches_package(self, test_client: TestClient) -> None:
        data = test_client.get("/").json()
        assert data["version"] == missed_pages.__version__
