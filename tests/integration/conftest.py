"""
Shared fixtures for integration tests.

PostgreSQL-backed tests need a running database (via docker-compose);
they are skipped when DATABASE_URL does not accept connections.
"""

from collections.abc import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from certgate.adapters.repository.postgres import PostgresRequestStore, run_migrations
from certgate.config.settings import get_settings


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool and apply migrations, or skip without a database."""
    settings = get_settings()
    try:
        psycopg.connect(settings.database_url, connect_timeout=2).close()
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def pg_store(pool: ConnectionPool) -> PostgresRequestStore:
    """Create store instance for each test."""
    return PostgresRequestStore(pool)


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean verification_requests table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM verification_requests")
        conn.commit()
    yield
