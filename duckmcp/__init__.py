"""DuckDB MCP Server: read-only access to DuckDB databases and data directories."""

__version__ = "1.0.0"
