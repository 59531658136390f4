"""Application lifespan: startup and shutdown.

Wiring of infrastructure only: the shared outbound HTTP client (identity
provider, email API), the SQL engine and, when enabled, tracing of both.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from preschool.core.config import Settings, get_settings
from preschool.shared.telemetry import get_telemetry, set_telemetry, setup_logging
from preschool.shared.telemetry.telemetry import TelemetryConfig

logger = logging.getLogger(__name__)


def configure_telemetry(app: FastAPI, settings: Settings) -> TelemetryConfig | None:
    """Set up tracing and instrument the app. Called from create_app() before startup."""
    if not settings.telemetry_enabled:
        return None
    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        enabled=True,
        environment=settings.telemetry_environment,
    )
    telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    )
    set_telemetry(telemetry)
    telemetry.instrument_fastapi(app)
    logger.info("Telemetry initialized")
    return telemetry


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit close the HTTP client and dispose the engine."""
    settings = get_settings()

    # ---- Startup ----
    setup_logging()
    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.external_call_timeout_seconds)
    )

    from preschool.infrastructure.persistence import database

    telemetry = get_telemetry()
    if telemetry is not None:
        telemetry.instrument_httpx(app.state.http_client)
        telemetry.instrument_sqlalchemy(database.get_engine())

    if settings.database_create_tables:
        await database.create_tables()
        logger.info("Database tables created from ORM metadata")

    yield

    # ---- Shutdown ----
    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Shared HTTP client closed")

    await database.dispose_engine()

    if telemetry is not None:
        telemetry.shutdown()
        set_telemetry(None)
