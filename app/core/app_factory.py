"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.routes import forms_router, health_router, quota_router, submissions_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import TAGS_METADATA, apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Form Relay API",
        description=(
            "Accepts contact and project-inquiry forms from embedded sites, "
            "throttles them per source IP and per client, forwards a "
            "notification email and keeps an audit record of every accepted "
            "submission. Requires X-API-Key."
        ),
        version="0.1.0",
        openapi_tags=TAGS_METADATA,
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(forms_router, prefix="/v1")
    app.include_router(submissions_router, prefix="/v1")
    app.include_router(quota_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
