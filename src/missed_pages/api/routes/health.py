"""Health and root endpoints.

Provides the root ``/`` endpoint (API identity and version) and the
``/health`` endpoint (liveness check that also queries the ledger store).
"""

from fastapi import APIRouter

from missed_pages import __version__
from missed_pages.db.errors import StorageUnavailable
from missed_pages.service import MissedPagesService


def router(service: MissedPagesService) -> APIRouter:
    """Build the health router."""
    api = APIRouter()

    @api.get("/")
    async def root():
        """Root endpoint showing API identity and current version."""
        return {"message": "Missed Pages API", "version": __version__}

    @api.get("/health")
    def health_check():
        """Health check endpoint."""
        try:
            ignored = len(service.get_ignored_entries())
        except StorageUnavailable:
            return {"status": "degraded", "storage": "unavailable"}
        return {"status": "ok", "storage": "ok", "ignored_titles": ignored}

    return api
