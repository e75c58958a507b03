"""
Route registration entry point for the FastAPI application.

Each router module exposes a ``router(...)`` factory closing over the ledger
service (and the authorizer where actions are gated).
"""

from fastapi import FastAPI

from missed_pages.api.permissions import Authorizer
from missed_pages.api.routes import health, ledger
from missed_pages.service import MissedPagesService


def register_routes(app: FastAPI, service: MissedPagesService, authorizer: Authorizer) -> None:
    """Register all API routes with the FastAPI app."""
    app.include_router(health.router(service))
    app.include_router(ledger.router(service, authorizer))
