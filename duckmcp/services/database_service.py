"""Database service owning the single DuckDB session."""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple

import duckdb

from duckmcp.lib.logging_config import get_logger, log_database_query, log_error_with_context
from duckmcp.models.config import DatabaseConfig
from duckmcp.models.error_types import ConnectionError, ExecutionError, QueryError

# Module logger
logger = get_logger(__name__)


class DatabaseService:
    """Service managing one DuckDB connection.

    Engine calls are blocking, so each one runs on a single-worker executor
    owned by the service and is awaited by the caller. One worker means one
    statement at a time against the session.
    """

    def __init__(self, config: DatabaseConfig):
        """Initialize database service.

        Args:
            config: Target description from DataLoader.detect_path_type
        """
        self.config = config
        self.conn: Optional[duckdb.DuckDBPyConnection] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    async def __aenter__(self) -> "DatabaseService":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self) -> bool:
        """Open the engine session.

        Directory targets get an in-memory read-write session so views can be
        registered; database files are opened read-only.

        Returns:
            True if connection successful

        Raises:
            ConnectionError: If the engine cannot open the target
        """
        if self.conn is not None:
            return True

        database = ':memory:' if self.config.is_directory else self.config.path
        read_only = not self.config.is_directory
        logger.info(f"Connecting to DuckDB: {database} (read_only={read_only})")

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="duckdb")
        loop = asyncio.get_running_loop()
        try:
            self.conn = await loop.run_in_executor(
                executor, functools.partial(duckdb.connect, database=database, read_only=read_only)
            )
        except duckdb.Error as e:
            executor.shutdown(wait=False)
            log_error_with_context(e, {'path': self.config.path, 'read_only': read_only}, logger)
            raise ConnectionError(f"Failed to connect to DuckDB: {e}")
        except Exception as e:
            executor.shutdown(wait=False)
            log_error_with_context(e, {'path': self.config.path, 'read_only': read_only}, logger)
            raise ConnectionError(f"Failed to connect to DuckDB: {e}")

        self._executor = executor
        logger.info(f"DuckDB session opened for {self.config.mode}: {self.config.path}")
        return True

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args))

    def _fetch(self, sql: str, params: Optional[Sequence[Any]]) -> Tuple[List[str], List[List[Any]]]:
        cursor = self.conn.execute(sql, params) if params else self.conn.execute(sql)
        if cursor.description is None:
            return [], []
        columns = [desc[0] for desc in cursor.description]
        rows = [list(row) for row in cursor.fetchall()]
        return columns, rows

    def _run_statement(self, sql: str, params: Optional[Sequence[Any]]) -> None:
        if params:
            self.conn.execute(sql, params)
        else:
            self.conn.execute(sql)

    async def query_with_columns(self, sql: str,
                                 params: Optional[Sequence[Any]] = None) -> Tuple[List[str], List[List[Any]]]:
        """Execute a statement and return the result descriptor columns and rows.

        Args:
            sql: SQL statement expected to return rows
            params: Positional parameters for ``?`` placeholders

        Returns:
            Tuple of (column names, rows as lists in column order)

        Raises:
            QueryError: If not connected or the engine rejects the statement
        """
        if self.conn is None:
            logger.error("Attempted to query but database is not connected")
            raise QueryError("Database not connected")

        log_database_query(sql, params, logger)
        try:
            columns, rows = await self._run(self._fetch, sql, params)
        except duckdb.Error as e:
            logger.error(f"Query failed: {e}")
            raise QueryError(f"Query failed: {e}")
        except Exception as e:
            log_error_with_context(e, {'query': sql[:100], 'params': params}, logger)
            raise QueryError(f"Query failed: {e}")

        logger.debug(f"Query returned {len(rows)} rows")
        return columns, rows

    async def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Execute a statement and return one dictionary per row.

        Raises:
            QueryError: If not connected or the engine rejects the statement
        """
        columns, rows = await self.query_with_columns(sql, params)
        return [dict(zip(columns, row)) for row in rows]

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> None:
        """Execute a statement with no expected result set.

        Raises:
            ExecutionError: If not connected or the engine rejects the statement
        """
        if self.conn is None:
            logger.error("Attempted to execute but database is not connected")
            raise ExecutionError("Database not connected")

        log_database_query(sql, params, logger)
        try:
            await self._run(self._run_statement, sql, params)
        except duckdb.Error as e:
            logger.error(f"Execution failed: {e}")
            raise ExecutionError(f"Execution failed: {e}")
        except Exception as e:
            log_error_with_context(e, {'query': sql[:100], 'params': params}, logger)
            raise ExecutionError(f"Execution failed: {e}")

    async def close(self) -> None:
        """Close the session. Calling it when already closed does nothing."""
        if self.conn is None:
            return

        conn, executor = self.conn, self._executor
        self.conn = None
        self._executor = None
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(executor, conn.close)
        except duckdb.Error as e:
            raise ConnectionError(f"Failed to close database: {e}")
        finally:
            executor.shutdown(wait=False)
        logger.info("DuckDB session closed")

    def close_sync(self) -> None:
        """Close the session from synchronous code such as signal handlers."""
        if self.conn is None:
            return

        conn, executor = self.conn, self._executor
        self.conn = None
        self._executor = None
        # Let an in-flight statement finish before closing underneath it
        executor.shutdown(wait=True)
        try:
            conn.close()
        except duckdb.Error as e:
            raise ConnectionError(f"Failed to close database: {e}")
        logger.info("DuckDB session closed")

    def is_connected(self) -> bool:
        return self.conn is not None

    def get_config(self) -> DatabaseConfig:
        """Return a copy of the target configuration."""
        return self.config.model_copy()
