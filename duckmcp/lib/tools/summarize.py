"""Statistical summary MCP tools built on DuckDB's SUMMARIZE."""

from typing import Any, List

from duckmcp.lib.logging_config import get_logger
from duckmcp.models.error_types import MCPError, SummarizeError
from duckmcp.models.tool_responses import SummaryResult
from duckmcp.services.database_service import DatabaseService
from duckmcp.services.query_utils import escape_identifier, quote_literal

logger = get_logger(__name__)

SUMMARY_FIELDS = (
    'column_name', 'column_type', 'min', 'max', 'approx_unique', 'avg', 'std',
    'q25', 'q50', 'q75', 'count', 'null_percentage',
)


def _fixed(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


class SummarizeTools:
    """Per-table and per-column statistics."""

    def __init__(self, db_service: DatabaseService):
        self.db_service = db_service

    async def summarize_table(self, table_name: str) -> List[SummaryResult]:
        """Summarize every column of a table.

        Raises:
            SummarizeError: If the table is missing or SUMMARIZE fails
        """
        sql = f"SUMMARIZE {escape_identifier(table_name)}"

        try:
            rows = await self.db_service.query(sql)
        except MCPError as e:
            logger.error(f"Failed to summarize table {table_name}: {e.message}")
            raise SummarizeError(
                table_name, f'Failed to summarize table "{table_name}": {e.message}'
            )

        return [
            SummaryResult(**{field: row.get(field) for field in SUMMARY_FIELDS})
            for row in rows
        ]

    async def summarize_column(self, table_name: str, column_name: str) -> SummaryResult:
        """Compute statistics for one column with an explicit aggregate.

        Numeric statistics use TRY_CAST to DOUBLE, so non-numeric values count
        as NULL for avg, std and the percentiles.

        Raises:
            SummarizeError: If the column is missing or the aggregate fails
        """
        col = escape_identifier(column_name)
        numeric = f"TRY_CAST({col} AS DOUBLE)"
        sql = f"""
            SELECT
                {quote_literal(column_name)} AS column_name,
                typeof(MIN({col})) AS column_type,
                MIN({col}) AS min,
                MAX({col}) AS max,
                COUNT(DISTINCT {col}) AS approx_unique,
                AVG({numeric}) AS avg,
                STDDEV({numeric}) AS std,
                PERCENTILE_CONT(0.25) WITHIN GROUP (ORDER BY {numeric}) AS q25,
                PERCENTILE_CONT(0.5) WITHIN GROUP (ORDER BY {numeric}) AS q50,
                PERCENTILE_CONT(0.75) WITHIN GROUP (ORDER BY {numeric}) AS q75,
                COUNT({col}) AS count,
                (COUNT(*) - COUNT({col})) * 100.0 / NULLIF(COUNT(*), 0) AS null_percentage
            FROM {escape_identifier(table_name)}
        """

        try:
            rows = await self.db_service.query(sql)
        except MCPError as e:
            raise SummarizeError(
                table_name,
                f'Failed to summarize column "{column_name}" in table "{table_name}": {e.message}',
                column_name=column_name
            )

        if not rows:
            raise SummarizeError(
                table_name,
                f'Column "{column_name}" not found in table "{table_name}"',
                column_name=column_name
            )

        return SummaryResult(**{field: rows[0].get(field) for field in SUMMARY_FIELDS})

    def format_summary(self, summaries: List[SummaryResult]) -> str:
        """Render summaries as one text block per column."""
        if not summaries:
            return 'No columns to summarize.'

        lines = ['Table Summary', '=' * 50, '']

        for col in summaries:
            lines.append(f"Column: {col.column_name} ({col.column_type})")
            lines.append('-' * 30)

            if col.count is not None:
                lines.append(f"Count: {col.count}")
            if col.null_percentage is not None:
                lines.append(f"Null %: {_fixed(col.null_percentage)}%")
            if col.approx_unique is not None:
                lines.append(f"Unique: {col.approx_unique}")
            if col.min is not None:
                lines.append(f"Min: {col.min}")
            if col.max is not None:
                lines.append(f"Max: {col.max}")
            if col.avg is not None:
                lines.append(f"Avg: {_fixed(col.avg)}")
            if col.std is not None:
                lines.append(f"Std: {_fixed(col.std)}")
            if col.q25 is not None:
                lines.append(f"Q25: {col.q25}")
            if col.q50 is not None:
                lines.append(f"Median: {col.q50}")
            if col.q75 is not None:
                lines.append(f"Q75: {col.q75}")

            lines.append('')

        return '\n'.join(lines) + '\n'
