"""Application lifespan: startup and shutdown.

Only wiring of infrastructure: Redis cache, the console HTTP client,
telemetry and the SQL engine. Everything started here is published on
app.state for the request dependencies.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from scopegate.core.config import get_settings
from scopegate.domain.enums import AuthMode

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: Redis cache (if enabled), console client (console mode),
    telemetry (if enabled). Shutdown runs in reverse and disposes the SQL
    engine last.
    """
    settings = get_settings()

    # ---- Startup ----
    if settings.redis_enabled:
        from scopegate.infrastructure.cache.redis_cache import CacheService

        cache = CacheService()
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None

    app.state.console_http_client = None
    app.state.console = None
    if AuthMode(settings.auth_mode) is AuthMode.CONSOLE:
        from scopegate.infrastructure.external.console import (
            ConsoleClient,
            build_console_http_client,
        )

        http = build_console_http_client(settings)
        app.state.console_http_client = http
        app.state.console = ConsoleClient(http, settings)
        logger.info("Console client ready: %s", settings.console_url)

    app.state.telemetry = None
    if settings.telemetry_enabled:
        from scopegate.shared.telemetry.telemetry import TelemetryConfig

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            environment=settings.telemetry_environment,
        )
        telemetry.setup(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        telemetry.instrument_fastapi(app)
        app.state.telemetry = telemetry

    yield

    # ---- Shutdown ----
    if app.state.telemetry is not None:
        app.state.telemetry.shutdown()
        app.state.telemetry = None

    if app.state.console_http_client is not None:
        await app.state.console_http_client.aclose()
        app.state.console_http_client = None
        app.state.console = None
        logger.info("Console HTTP client closed")

    if app.state.cache is not None:
        await app.state.cache.disconnect()
        app.state.cache = None

    from scopegate.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
