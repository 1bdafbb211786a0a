"""
MODULE: core.database
RESPONSIBILITY: PostgreSQL connection pool and the shared transaction helper.
ALLOWED: psycopg2, loguru, connection pooling logic.
FORBIDDEN: Business logic, entity-specific queries (use repositories).
ERRORS: DatabaseConnectionError, DatabaseQueryError, DatabaseTimeoutError.

Database manager with a thread-safe connection pool.

Every logical operation runs inside exactly one `transaction()` block:
commit happens only after the block finishes, any exception rolls back
before the connection goes back to the pool.
"""

from contextlib import contextmanager
from threading import Lock
from typing import List, Dict, Any, Optional, Iterator

import psycopg2
import psycopg2.extensions
import psycopg2.extras
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool
from loguru import logger

from config.settings import DatabaseConfig
from core.exceptions import (
    StorageError,
    DatabaseConnectionError,
    DatabaseQueryError,
    DatabaseTimeoutError,
)

# UUID parameters are passed as native uuid.UUID values
psycopg2.extras.register_uuid()


class DatabaseManager:
    """
    Manager for the PostgreSQL database

    Owns a ThreadedConnectionPool so concurrent request workers each get
    their own connection.

    Attributes:
        db_config: Connection settings
        default_timeout: Statement deadline in seconds used when the caller gives none
    """

    def __init__(self, db_config: DatabaseConfig, pool: Optional[ThreadedConnectionPool] = None):
        """
        Args:
            db_config: Connection settings
            pool: Ready pool (tests inject one); created by connect() otherwise
        """
        self.db_config = db_config
        self.default_timeout: Optional[float] = db_config.statement_timeout or None
        self._pool = pool
        # concurrent first requests must not each build a pool
        self._pool_lock = Lock()

    def connect(self) -> None:
        """
        Create the connection pool

        Raises:
            DatabaseConnectionError: If PostgreSQL is unreachable
        """
        with self._pool_lock:
            if self._pool is not None:
                logger.debug("Connection pool already created")
                return
            self._pool = self._create_pool()

    def _create_pool(self) -> ThreadedConnectionPool:
        try:
            pool = ThreadedConnectionPool(
                self.db_config.pool_min,
                self.db_config.pool_max,
                host=self.db_config.host,
                database=self.db_config.database,
                user=self.db_config.user,
                password=self.db_config.password,
                port=self.db_config.port,
                connect_timeout=self.db_config.connect_timeout,
                cursor_factory=RealDictCursor,
            )
            logger.info(f"Connected to database: {self.db_config.database}")
            return pool

        except psycopg2.Error as e:
            error_msg = f"Could not connect to database {self.db_config.database}: {e}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg, original_error=e) from e

    def close(self) -> None:
        """Close every pooled connection"""
        with self._pool_lock:
            pool, self._pool = self._pool, None
        if pool is None:
            return
        try:
            pool.closeall()
            logger.info("Database connection pool closed")
        except psycopg2.Error as e:
            logger.warning(f"Error while closing the connection pool: {e}")

    def is_connected(self) -> bool:
        return self._pool is not None and not getattr(self._pool, "closed", False)

    @contextmanager
    def connection(self) -> Iterator[psycopg2.extensions.connection]:
        """Borrow a connection from the pool and always return it"""
        if self._pool is None:
            raise DatabaseConnectionError("No active database connection pool")

        try:
            conn = self._pool.getconn()
        except psycopg2.Error as e:
            error_msg = f"Could not get a connection from the pool: {e}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg, original_error=e) from e

        try:
            yield conn
        finally:
            # a connection closed by the server must not go back into the pool
            self._pool.putconn(conn, close=bool(conn.closed))

    @contextmanager
    def transaction(self, timeout: Optional[float] = None) -> Iterator[Any]:
        """
        Run a block in a single transaction

        Args:
            timeout: Statement deadline in seconds; the configured default is used when None

        Yields:
            A dict cursor bound to the transaction

        Raises:
            DatabaseTimeoutError: If a statement exceeded the deadline
            DatabaseQueryError: If a statement or the commit failed
            StorageError: If the rollback itself failed (carries both errors)
        """
        deadline = self.default_timeout if timeout is None else timeout

        with self.connection() as conn:
            try:
                with conn.cursor() as cursor:
                    if deadline:
                        cursor.execute(
                            "SELECT set_config('statement_timeout', %s, true)",
                            (str(max(1, int(deadline * 1000))),),
                        )
                    yield cursor
                conn.commit()

            except psycopg2.extensions.QueryCanceledError as e:
                self._rollback(conn, e)
                error_msg = f"Statement exceeded its deadline of {deadline}s: {e}"
                logger.error(error_msg)
                raise DatabaseTimeoutError(error_msg, original_error=e) from e

            except psycopg2.Error as e:
                self._rollback(conn, e)
                error_msg = f"Query failed: {e}"
                logger.error(error_msg)
                raise DatabaseQueryError(error_msg, original_error=e) from e

            except BaseException as e:
                self._rollback(conn, e)
                raise

    @staticmethod
    def _rollback(conn, cause: BaseException) -> None:
        """Roll back; if that fails too, raise an error that carries both causes"""
        try:
            conn.rollback()
        except psycopg2.Error as rollback_error:
            error_msg = f"Rollback failed ({rollback_error}) while handling: {cause!r}"
            logger.error(error_msg)
            raise StorageError(
                error_msg,
                original_error=cause,
                rollback_error=rollback_error,
            ) from cause

    def fetch_all(self, query: str, params: tuple = (), timeout: Optional[float] = None) -> List[Dict[str, Any]]:
        """
        Run a read query in its own transaction

        Returns:
            Result rows as dicts
        """
        with self.transaction(timeout) as cursor:
            cursor.execute(query, params)
            rows = cursor.fetchall()
        logger.debug(f"SELECT returned {len(rows)} rows")
        return [dict(row) for row in rows]

    def fetch_one(self, query: str, params: tuple = (), timeout: Optional[float] = None) -> Optional[Dict[str, Any]]:
        """Run a read query and return the first row, or None"""
        with self.transaction(timeout) as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
        return dict(row) if row is not None else None

    def execute_script(self, sql_script: str) -> None:
        """Execute a multi-statement script (schema migrations) in one transaction"""
        with self.transaction(timeout=0) as cursor:
            cursor.execute(sql_script)

    def check_connection(self) -> bool:
        """
        Check that the database answers

        Returns:
            True if a trivial query succeeds
        """
        try:
            self.fetch_one("SELECT 1 AS ok")
            return True
        except StorageError:
            return False

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
