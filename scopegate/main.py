"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, middleware, routers.
See scopegate.core.lifespan and scopegate.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from scopegate.api.v1 import api_router
from scopegate.core.config import get_settings
from scopegate.core.exception_handlers import register_exception_handlers
from scopegate.core.lifespan import create_lifespan
from scopegate.core.limiter import limiter
from scopegate.middleware import ContextMiddleware, RequestIDMiddleware
from scopegate.shared.telemetry import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # First added = innermost. Order (outermost first): request ID, CORS, context headers.
    app.add_middleware(
        ContextMiddleware,
        organization_header=settings.organization_header_name,
        branch_header=settings.branch_header_name,
        team_header=settings.team_header_name,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
