"""Command line entry point for the DuckDB MCP server."""
