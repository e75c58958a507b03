"""
FastAPI application for the missed-pages ledger.

``create_app`` wires a service and an authorizer into a FastAPI app and, by
default, makes sure the ledger table exists first. Serve it with
``uvicorn --factory missed_pages.api.server:create_app`` or ``missed-pages run``.
"""

from fastapi import FastAPI

from missed_pages import __version__
from missed_pages.api.permissions import Authorizer, RoleAuthorizer
from missed_pages.api.routes.register import register_routes
from missed_pages.db.schema import ensure_schema
from missed_pages.service import MissedPagesService, build_service


def create_app(
    service: MissedPagesService | None = None,
    authorizer: Authorizer | None = None,
    *,
    init_schema: bool = True,
) -> FastAPI:
    """
    Build the API application.

    Args:
        service: Ledger service; built from configuration when omitted.
        authorizer: Capability checker; role-based when omitted.
        init_schema: Run ``ensure_schema`` against the service's store.
    """
    service = service or build_service()
    authorizer = authorizer or RoleAuthorizer()
    if init_schema:
        ensure_schema(service.store.connect)

    app = FastAPI(title="Missed Pages", version=__version__)
    app.state.service = service
    register_routes(app, service, authorizer)
    return app


def run(host: str | None = None, port: int | None = None) -> None:
    """Serve the configured app with uvicorn."""
    import uvicorn

    from missed_pages.config import config

    uvicorn.run(
        create_app(),
        host=host or config.server.host,
        port=port or config.server.port,
    )


if __name__ == "__main__":
    run()
