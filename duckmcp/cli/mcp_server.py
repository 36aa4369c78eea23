"""MCP server entry point for DuckDB databases and data directories."""

import argparse
import asyncio
import signal
import sys
import threading
from typing import List, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from duckmcp import __version__
from duckmcp.lib.logging_config import get_logger, log_error_with_context, setup_logging
from duckmcp.lib.mcp_tools import ToolDispatcher
from duckmcp.models.config import DatabaseConfig, ServerSettings
from duckmcp.services.data_loader import DataLoader
from duckmcp.services.database_service import DatabaseService
from duckmcp.transport.stdio_server import StdioTransport

logger = get_logger(__name__)


def create_mcp_server(dispatcher: ToolDispatcher) -> FastMCP:
    """Create the FastMCP server and register the tool catalog on it.

    Each tool forwards to the dispatcher and takes its description from the
    dispatcher's catalog; parameter types mirror the catalog's input schemas.
    Error responses are raised as ToolError so the client receives an
    ``isError`` result carrying the dispatcher's message.

    Args:
        dispatcher: Tool dispatcher bound to the open database session

    Returns:
        FastMCP instance ready to run on any transport
    """
    mcp = FastMCP("DuckDB MCP Server")
    descriptions = {tool['name']: tool['description'] for tool in dispatcher.list_tools()}

    async def call(name: str, **arguments) -> str:
        response = await dispatcher.call_tool(name, arguments)
        if response.is_error:
            raise ToolError(response.first_text)
        return response.first_text

    @mcp.tool(name="get_tables", description=descriptions["get_tables"])
    async def get_tables() -> str:
        """List all available tables and views in the database."""
        return await call("get_tables")

    @mcp.tool(name="get_schema", description=descriptions["get_schema"])
    async def get_schema(table_name: str) -> str:
        """Get the schema (columns and types) for a specific table.

        Args:
            table_name: Name of the table
        """
        return await call("get_schema", table_name=table_name)

    @mcp.tool(name="describe_table", description=descriptions["describe_table"])
    async def describe_table(table_name: str) -> str:
        """Get detailed information about a table including schema and row count.

        Args:
            table_name: Name of the table
        """
        return await call("describe_table", table_name=table_name)

    @mcp.tool(name="execute_query", description=descriptions["execute_query"])
    async def execute_query(sql: str, limit: Optional[float] = None) -> str:
        """Execute a SQL query against the database (readonly mode).

        Args:
            sql: SQL query to execute
            limit: Maximum number of rows to return in formatted output (default: 100)
        """
        return await call("execute_query", sql=sql, limit=limit)

    @mcp.tool(name="summarize_table", description=descriptions["summarize_table"])
    async def summarize_table(table_name: str) -> str:
        """Generate statistical summary of all columns in a table using DuckDB SUMMARIZE.

        Args:
            table_name: Name of the table
        """
        return await call("summarize_table", table_name=table_name)

    @mcp.tool(name="get_database_info", description=descriptions["get_database_info"])
    async def get_database_info() -> str:
        """Get general information about the database and connection."""
        return await call("get_database_info")

    return mcp


class DuckDBMCPServer:
    """Owns the database session, the loader and the tool dispatcher."""

    def __init__(self, settings: ServerSettings):
        self.settings = settings
        self.config: Optional[DatabaseConfig] = None
        self.db_service: Optional[DatabaseService] = None
        self.loader: Optional[DataLoader] = None
        self.dispatcher: Optional[ToolDispatcher] = None

    async def initialize(self, data_path: str) -> ToolDispatcher:
        """Detect the target, connect, register views and build the tools.

        Args:
            data_path: Database file or directory of data files

        Returns:
            The tool dispatcher for the opened session

        Raises:
            PathNotFoundError: If the path does not exist
            UnsupportedFileTypeError: If the file extension is not a database file
            ConnectionError: If the engine session cannot be opened
        """
        self.config = DataLoader.detect_path_type(data_path)

        self.db_service = DatabaseService(self.config)
        await self.db_service.connect()

        self.loader = DataLoader(self.db_service, self.config)
        await self.loader.load_data()

        self.dispatcher = ToolDispatcher.from_service(
            self.db_service,
            self.loader.loaded_views,
            default_limit=self.settings.default_limit
        )

        logger.info(f"DuckDB MCP Server initialized with {self.config.mode}: {data_path}")
        return self.dispatcher

    def cleanup(self):
        """Close the database session; safe to call more than once."""
        if self.db_service is None:
            return

        logger.info("Cleaning up resources...")
        try:
            self.db_service.close_sync()
            logger.info("Database connection closed")
        except Exception as e:
            logger.error(f"Error closing database connection: {e}")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser.

    Options left unset fall back to environment variables, the YAML config
    file and then built-in defaults.
    """
    parser = argparse.ArgumentParser(
        prog="duckmcp",
        description="DuckDB MCP Server - Query databases and data files via MCP"
    )
    parser.add_argument(
        "path",
        help="Path to DuckDB database file or directory containing data files"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default=None,
        help="Transport mode: stdio (default) or sse"
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host for SSE server and health API (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for SSE server (default: 3000)"
    )
    parser.add_argument(
        "--health-port",
        type=int,
        default=None,
        help="Port for health API (disabled unless set)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file"
    )
    return parser


def run_health_api(health_api):
    """Run health API in a separate thread.

    Args:
        health_api: Health API instance to run
    """
    try:
        health_api.run()
    except Exception as e:
        logger.error(f"Health API error: {e}")


def start_health_api(server: DuckDBMCPServer, host: str, port: int) -> threading.Thread:
    """Start the health API in a daemon thread."""
    # fastapi and uvicorn are only needed when the health API is enabled
    from duckmcp.services.health_api import HealthAPI

    logger.info(f"Starting Health API on {host}:{port}")
    health_api = HealthAPI(
        db_service=server.db_service,
        dispatcher=server.dispatcher,
        host=host,
        port=port
    )
    thread = threading.Thread(target=run_health_api, args=(health_api,), daemon=True)
    thread.start()
    return thread


def main(argv: Optional[List[str]] = None):
    """Main entry point for the MCP server."""
    args = build_parser().parse_args(argv)

    try:
        settings = ServerSettings(
            overrides={
                'transport': args.transport,
                'host': args.host,
                'port': args.port,
                'health_port': args.health_port,
                'log_level': args.log_level,
            },
            config_path=args.config
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        log_file=settings.log_file
    )

    server = DuckDBMCPServer(settings)

    try:
        dispatcher = asyncio.run(server.initialize(args.path))
    except Exception as e:
        log_error_with_context(e, {'operation': 'initialize', 'path': args.path}, logger)
        logger.error(f"Failed to initialize server: {e}")
        server.cleanup()
        sys.exit(1)

    def shutdown_handler(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.cleanup()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)

    mcp = create_mcp_server(dispatcher)

    if settings.health_port is not None:
        start_health_api(server, settings.host, settings.health_port)

    try:
        if settings.transport == "stdio":
            StdioTransport(mcp).run()
        else:
            logger.info(f"Starting DuckDB MCP Server in SSE mode on {settings.host}:{settings.port}")
            mcp.run(
                transport="sse",
                host=settings.host,
                port=settings.port
            )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested via keyboard interrupt")
    except Exception as e:
        logger.error(f"Server failed: {e}")
        sys.exit(1)
    finally:
        server.cleanup()


if __name__ == "__main__":
    main()
