"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, the request store and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from certgate.adapters.access import StaticAccessControl
from certgate.adapters.events import LoggingEventPublisher
from certgate.adapters.issuance import ConsoleCertificateIssuer
from certgate.adapters.repository import (
    InMemoryRequestStore,
    PostgresRequestStore,
    run_migrations,
)
from certgate.adapters.transport import ConsoleVerificationTransport
from certgate.api.v1 import router as v1_router
from certgate.config.settings import Settings, get_settings
from certgate.domain.certification import OracleConfiguration
from certgate.domain.ports import RequestStore

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Oracle-gated certificate issuance API v1 - Request verifications, "
        "receive oracle callbacks and administer the oracle configuration",
    },
]


def init_app_state(app: FastAPI, settings: Settings, store: RequestStore) -> None:
    """
    Attach long-lived collaborators to app.state for dependency injection.

    Configuration starts from settings and is changed at runtime only
    through the admin endpoints.
    """
    issuer = ConsoleCertificateIssuer(settings.issuer_target) if settings.issuer_target else None
    app.state.store = store
    app.state.transport = ConsoleVerificationTransport()
    app.state.events = LoggingEventPublisher()
    app.state.access_control = StaticAccessControl(
        principals=settings.principals,
        admins=settings.admin_principals,
        requesters=settings.requester_principals,
        transport=settings.transport_principal,
    )
    app.state.configuration = OracleConfiguration(
        verification_source=settings.verification_source,
        issuer=issuer,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Configures logging
    - Creates the request store (and database pool, for postgres)
    - Runs migrations on startup
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    if settings.store_backend == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        try:
            logger.info("Running database migrations...")
            run_migrations(pool)
        except Exception:
            pool.close()
            raise
        store: RequestStore = PostgresRequestStore(pool)
    else:
        logger.warning("Using in-memory request store; requests are lost on restart")
        store = InMemoryRequestStore()

    init_app_state(app, settings, store)

    if not settings.verification_source:
        logger.warning("No verification source configured; requests will be refused")
    if not settings.issuer_target:
        logger.warning("No issuer configured; requests will be refused")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="certgate",
    description="Oracle-gated calibration certificate issuance - certificates are "
    "issued only after an external verification callback succeeds",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with store validation.

    Returns 200 OK if application and request store are healthy.
    Raises exception if the database connection fails.
    """
    request.app.state.store.ping()

    return {"status": "healthy"}
