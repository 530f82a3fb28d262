"""
PostgreSQL repository adapter - Implements RequestStore protocol.

This module provides the PostgreSQL implementation of the domain's
request store port using psycopg3 with raw SQL.

Concurrency Design - At-Most-Once Fulfillment:
----------------------------------------------
mark_fulfilled locks the request row with SELECT FOR UPDATE before the
conditional UPDATE. A second transaction delivering the same handle
blocks on the row lock, then reads fulfilled = TRUE and returns
RequestAlreadyFulfilled. The UPDATE additionally carries
"AND fulfilled = FALSE" so the transition is guarded even without the
lock. Distinct handles lock distinct rows and never wait on each other.

Handle uniqueness is enforced by the primary key; create uses
ON CONFLICT DO NOTHING and reports the conflict as False.
"""

import logging
from pathlib import Path

from psycopg_pool import ConnectionPool

from certgate.domain.exceptions import RequestAlreadyFulfilled, UnexpectedRequestID
from certgate.domain.ports import VerificationRequest

logger = logging.getLogger(__name__)

_COLUMNS = "handle, created_at, subject, recipient, content_reference, result, fulfilled"


def _row_to_request(row: tuple) -> VerificationRequest:
    # result is stored as NUMERIC(78, 0) to hold the full uint256 range
    result = row[5]
    return VerificationRequest(
        handle=row[0],
        created_at=row[1],
        subject=row[2],
        recipient=row[3],
        content_reference=row[4],
        result=int(result) if result is not None else None,
        fulfilled=row[6],
    )


class PostgresRequestStore:
    """
    Implements RequestStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create(self, request: VerificationRequest) -> bool:
        """
        Insert a PENDING request.

        Returns:
            True if inserted, False if the handle already exists
        """
        sql = f"""
            INSERT INTO verification_requests ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, NULL, FALSE)
            ON CONFLICT (handle) DO NOTHING
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    request.handle,
                    request.created_at,
                    request.subject,
                    request.recipient,
                    request.content_reference,
                ),
            )
            conn.commit()
            return cursor.rowcount == 1

    def get(self, handle: str) -> VerificationRequest | None:
        sql = f"SELECT {_COLUMNS} FROM verification_requests WHERE handle = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (handle,))
            row = cursor.fetchone()
        return _row_to_request(row) if row is not None else None

    def mark_fulfilled(self, handle: str, result: int | None) -> VerificationRequest:
        """
        Atomically set fulfilled and result for a PENDING request.

        Raises:
            UnexpectedRequestID: Handle was never created
            RequestAlreadyFulfilled: Handle was already fulfilled
        """
        select_sql = """
            SELECT fulfilled FROM verification_requests
            WHERE handle = %s
            FOR UPDATE
        """

        update_sql = f"""
            UPDATE verification_requests
            SET fulfilled = TRUE, result = %s, fulfilled_at = NOW()
            WHERE handle = %s AND fulfilled = FALSE
            RETURNING {_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(select_sql, (handle,))
            row = cursor.fetchone()

            if row is None:
                conn.rollback()
                raise UnexpectedRequestID(handle)
            if row[0]:
                conn.rollback()
                raise RequestAlreadyFulfilled(handle)

            cursor.execute(update_sql, (result, handle))
            updated = cursor.fetchone()
            if updated is None:
                conn.rollback()
                raise RequestAlreadyFulfilled(handle)

            conn.commit()
            return _row_to_request(updated)

    def ping(self) -> None:
        """Raise if the database is unreachable."""
        with self._pool.connection() as conn:
            conn.execute("SELECT 1")


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: certgate/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
