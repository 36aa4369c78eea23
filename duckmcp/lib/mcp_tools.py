"""MCP Tools Orchestration Layer.

This module declares the tool catalog and routes named calls with arguments to
the tool implementations in the tools package. Every call returns a
ToolResponse: failures become error responses here and never propagate to the
transport.
"""

import copy
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional

from duckmcp.lib.logging_config import get_logger, log_tool_call
from duckmcp.lib.tools import MetadataTools, QueryTools, SummarizeTools
from duckmcp.models.error_types import MCPError, UnknownToolError
from duckmcp.models.tool_responses import ToolModel, ToolResponse
from duckmcp.services.database_service import DatabaseService

logger = get_logger(__name__)

DEFAULT_LIMIT = 100

_TABLE_NAME_SCHEMA = {
    'type': 'object',
    'properties': {
        'table_name': {
            'type': 'string',
            'description': 'Name of the table',
        },
    },
    'required': ['table_name'],
}

TOOL_CATALOG: List[Dict[str, Any]] = [
    {
        'name': 'get_tables',
        'description': 'List all available tables and views in the database',
        'inputSchema': {'type': 'object', 'properties': {}},
    },
    {
        'name': 'get_schema',
        'description': 'Get the schema (columns and types) for a specific table',
        'inputSchema': _TABLE_NAME_SCHEMA,
    },
    {
        'name': 'describe_table',
        'description': 'Get detailed information about a table including schema and row count',
        'inputSchema': _TABLE_NAME_SCHEMA,
    },
    {
        'name': 'execute_query',
        'description': 'Execute a SQL query against the database (readonly mode)',
        'inputSchema': {
            'type': 'object',
            'properties': {
                'sql': {
                    'type': 'string',
                    'description': 'SQL query to execute',
                },
                'limit': {
                    'type': 'number',
                    'description': 'Maximum number of rows to return in formatted output (default: 100)',
                },
            },
            'required': ['sql'],
        },
    },
    {
        'name': 'summarize_table',
        'description': 'Generate statistical summary of all columns in a table using DuckDB SUMMARIZE',
        'inputSchema': _TABLE_NAME_SCHEMA,
    },
    {
        'name': 'get_database_info',
        'description': 'Get general information about the database and connection',
        'inputSchema': {'type': 'object', 'properties': {}},
    },
]


def _require(arguments: Dict[str, Any], name: str) -> Any:
    value = arguments.get(name)
    if value is None or value == '':
        raise MCPError(f"Missing required argument: {name}", recoverable=False)
    return value


class ToolDispatcher:
    """Routes tool calls to the metadata, query and summarize tools."""

    def __init__(self, metadata_tools: MetadataTools, query_tools: QueryTools,
                 summarize_tools: SummarizeTools, default_limit: int = DEFAULT_LIMIT):
        self.metadata_tools = metadata_tools
        self.query_tools = query_tools
        self.summarize_tools = summarize_tools
        self.default_limit = default_limit
        self.call_count = 0
        self.error_count = 0

        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[str]]] = {
            'get_tables': self._get_tables,
            'get_schema': self._get_schema,
            'describe_table': self._describe_table,
            'execute_query': self._execute_query,
            'summarize_table': self._summarize_table,
            'get_database_info': self._get_database_info,
        }

    @classmethod
    def from_service(cls, db_service: DatabaseService, view_sources: Optional[Dict[str, str]] = None,
                     default_limit: int = DEFAULT_LIMIT) -> "ToolDispatcher":
        """Build the dispatcher and its tools around one database service."""
        return cls(
            MetadataTools(db_service, view_sources),
            QueryTools(db_service),
            SummarizeTools(db_service),
            default_limit=default_limit
        )

    def list_tools(self) -> List[Dict[str, Any]]:
        """Return the tool catalog."""
        return copy.deepcopy(TOOL_CATALOG)

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResponse:
        """Invoke a tool by name.

        Args:
            name: Tool name from the catalog
            arguments: Tool arguments

        Returns:
            ToolResponse with one text item; is_error set when the call failed
        """
        self.call_count += 1
        arguments = arguments or {}
        log_tool_call(name, arguments, logger)

        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise UnknownToolError(name)
            text = await handler(arguments)
            return ToolResponse.from_text(text)
        except MCPError as e:
            self.error_count += 1
            logger.error(f"MCP error in {name}: {e.message}")
            return ToolResponse.from_error(e.message)
        except Exception as e:
            self.error_count += 1
            logger.error(f"Unexpected error in {name}: {e}", exc_info=True)
            return ToolResponse.from_error(str(e))

    async def _get_tables(self, arguments: Dict[str, Any]) -> str:
        tables = await self.metadata_tools.get_tables()
        return _json_list(tables)

    async def _get_schema(self, arguments: Dict[str, Any]) -> str:
        schema = await self.metadata_tools.get_table_schema(_require(arguments, 'table_name'))
        return schema.to_json()

    async def _describe_table(self, arguments: Dict[str, Any]) -> str:
        description = await self.metadata_tools.describe_table(_require(arguments, 'table_name'))
        return description.to_json()

    async def _execute_query(self, arguments: Dict[str, Any]) -> str:
        sql = _require(arguments, 'sql')
        limit = arguments.get('limit')
        if limit is None:
            limit = self.default_limit
        result = await self.query_tools.execute_query(sql)
        return self.query_tools.format_results(result, int(limit))

    async def _summarize_table(self, arguments: Dict[str, Any]) -> str:
        summary = await self.summarize_tools.summarize_table(_require(arguments, 'table_name'))
        return self.summarize_tools.format_summary(summary)

    async def _get_database_info(self, arguments: Dict[str, Any]) -> str:
        info = await self.metadata_tools.get_database_info()
        return info.to_json()


def _json_list(items: List[ToolModel]) -> str:
    return json.dumps([item.to_wire() for item in items], indent=2, ensure_ascii=False)
