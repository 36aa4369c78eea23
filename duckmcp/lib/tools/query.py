"""Query execution MCP tools.

Statements are passed to DuckDB untouched; write protection comes from the
engine's read-only mode, not from inspecting SQL here.
"""

import time
from typing import Any, List, Optional

from duckmcp.lib.logging_config import get_logger
from duckmcp.models.error_types import MCPError, QueryError
from duckmcp.models.tool_responses import QueryResult, QueryValidation
from duckmcp.services.database_service import DatabaseService

logger = get_logger(__name__)

MIN_COLUMN_WIDTH = 3


def render_cell(value: Any) -> str:
    """Render one value for the text table."""
    if value is None:
        return 'NULL'
    return str(value)


class QueryTools:
    """Run SQL and shape results into a columnar envelope and text table."""

    def __init__(self, db_service: DatabaseService):
        self.db_service = db_service

    async def execute_query(self, sql: str) -> QueryResult:
        """Execute a SQL statement and measure its latency.

        Columns come from the engine's result descriptor, so every row is laid
        out in the same column order regardless of its values.

        Args:
            sql: SQL statement to execute

        Returns:
            QueryResult with columns, rows, row count and execution time (ms)

        Raises:
            QueryError: If the engine rejects the statement
        """
        logger.info(f"Executing query: {sql[:100]}{'...' if len(sql) > 100 else ''}")
        start_time = time.perf_counter()

        try:
            columns, rows = await self.db_service.query_with_columns(sql)
        except MCPError as e:
            execution_time = round((time.perf_counter() - start_time) * 1000, 2)
            raise QueryError(f"Query execution failed ({execution_time}ms): {e.message}")

        execution_time = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(f"Query returned {len(rows)} rows in {execution_time:.2f}ms")

        if not rows:
            return QueryResult(columns=[], rows=[], row_count=0, execution_time=execution_time)

        return QueryResult(
            columns=columns,
            rows=rows,
            row_count=len(rows),
            execution_time=execution_time
        )

    async def explain_query(self, sql: str) -> QueryResult:
        """Return the engine's plan for a statement."""
        return await self.execute_query(f"EXPLAIN {sql}")

    async def validate_query(self, sql: str) -> QueryValidation:
        """Check whether a statement can be planned. Never raises."""
        try:
            await self.explain_query(sql)
            return QueryValidation(valid=True)
        except Exception as e:
            return QueryValidation(valid=False, error=str(e))

    def format_results(self, result: QueryResult, limit: Optional[int] = None) -> str:
        """Render a result as a pipe-delimited fixed-width text table.

        Args:
            result: Query result to render
            limit: Maximum number of rows to display

        Returns:
            Text table followed by a row count and timing line
        """
        if result.row_count == 0:
            return 'No results returned.'

        truncated = bool(limit) and limit > 0 and len(result.rows) > limit
        display_rows = result.rows[:limit] if truncated else result.rows
        rendered: List[List[str]] = [[render_cell(cell) for cell in row] for row in display_rows]

        widths = []
        for i, column in enumerate(result.columns):
            data_width = max((len(row[i]) for row in rendered), default=0)
            widths.append(max(len(column), data_width, MIN_COLUMN_WIDTH))

        lines = [
            ' | '.join(column.ljust(widths[i]) for i, column in enumerate(result.columns)),
            '-|-'.join('-' * width for width in widths),
        ]
        for row in rendered:
            lines.append(' | '.join(cell.ljust(widths[i]) for i, cell in enumerate(row)))

        output = '\n'.join(lines) + '\n'

        if truncated:
            output += f"\n... and {result.row_count - limit} more rows\n"

        output += f"\n{result.row_count} rows"
        if result.execution_time is not None:
            output += f" ({result.execution_time}ms)"

        return output
