"""Catalog-level MCP tools.

Tables, column schemas, row counts and engine information, read from DuckDB's
information_schema on every call.
"""

from typing import Dict, List, Optional

from duckmcp.lib.logging_config import get_logger
from duckmcp.models.tool_responses import (
    ColumnInfo,
    DatabaseInfo,
    TableDescription,
    TableInfo,
    TableSchema,
)
from duckmcp.services.database_service import DatabaseService
from duckmcp.services.query_utils import escape_identifier

logger = get_logger(__name__)

INTERNAL_SCHEMAS = ('information_schema', 'pg_catalog')


class MetadataTools:
    """Catalog queries against one database service."""

    def __init__(self, db_service: DatabaseService, view_sources: Optional[Dict[str, str]] = None):
        """Initialize metadata tools.

        Args:
            db_service: Connected database service
            view_sources: Read expressions of loader-registered views, by view name
        """
        self.db_service = db_service
        self.view_sources = view_sources if view_sources is not None else {}

    async def get_tables(self) -> List[TableInfo]:
        """List user tables and views ordered by schema, then name."""
        query = f"""
            SELECT
                table_name,
                table_schema,
                table_type
            FROM information_schema.tables
            WHERE table_schema NOT IN ({', '.join('?' for _ in INTERNAL_SCHEMAS)})
            ORDER BY table_schema, table_name
        """
        rows = await self.db_service.query(query, list(INTERNAL_SCHEMAS))

        tables = []
        for row in rows:
            tables.append(TableInfo(
                name=row['table_name'],
                schema_name=row['table_schema'],
                type='TABLE' if row['table_type'] == 'BASE TABLE' else 'VIEW',
                source=self.view_sources.get(row['table_name'])
            ))

        logger.debug(f"Found {len(tables)} tables and views")
        return tables

    async def get_table_schema(self, table_name: str) -> TableSchema:
        """Get columns of a table in declared order."""
        query = """
            SELECT
                column_name AS name,
                data_type AS type,
                is_nullable AS nullable,
                column_default AS default_value
            FROM information_schema.columns
            WHERE table_name = ?
            ORDER BY ordinal_position
        """
        rows = await self.db_service.query(query, [table_name])

        columns = [
            ColumnInfo(
                name=row['name'],
                type=row['type'],
                nullable=row['nullable'] == 'YES',
                default_value=row['default_value'] or None
            )
            for row in rows
        ]
        return TableSchema(table_name=table_name, columns=columns)

    async def describe_table(self, table_name: str) -> TableDescription:
        """Get a table's schema and row count.

        Raises:
            QueryError: If the table does not exist
        """
        schema = await self.get_table_schema(table_name)

        rows = await self.db_service.query(
            f"SELECT COUNT(*) AS count FROM {escape_identifier(table_name)}"
        )
        row_count = rows[0]['count'] if rows else 0

        logger.info(f"Described table {table_name}: {len(schema.columns)} columns, {row_count} rows")
        return TableDescription(table_schema=schema, row_count=row_count or 0)

    async def get_database_info(self) -> DatabaseInfo:
        """Get engine version, the table list and the readonly flag."""
        rows = await self.db_service.query("SELECT version() AS version")
        version = rows[0]['version'] if rows else 'Unknown'

        tables = await self.get_tables()

        return DatabaseInfo(
            version=version or 'Unknown',
            tables=tables,
            total_tables=len(tables),
            readonly=self.db_service.get_config().readonly
        )
