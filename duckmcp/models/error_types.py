"""Error types for DuckDB MCP Server."""

from typing import Optional


class MCPError(Exception):
    """Base error class for MCP operations."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class PathNotFoundError(MCPError):
    """Error raised when the target path does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Path does not exist: {path}", recoverable=False)
        self.path = path


class UnsupportedFileTypeError(MCPError):
    """Error raised when a single-file target is not a database file."""

    def __init__(self, path: str, extension: str):
        message = (
            f"Unsupported file type: {extension or '(none)'}. "
            "Use .db, .duckdb, .sqlite, or specify a directory."
        )
        super().__init__(message, recoverable=False)
        self.path = path
        self.extension = extension


class ConnectionError(MCPError):
    """Error raised when the engine session cannot be opened."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=True)


class QueryError(MCPError):
    """Error raised when a statement fails inside the engine."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=True)


class ExecutionError(QueryError):
    """Error raised when a statement without a result set fails."""


class SummarizeError(MCPError):
    """Error raised when a table or column cannot be summarized."""

    def __init__(self, table_name: str, message: str, column_name: Optional[str] = None):
        super().__init__(message, recoverable=False)
        self.table_name = table_name
        self.column_name = column_name


class UnknownToolError(MCPError):
    """Error raised when a tool name is not in the catalog."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", recoverable=False)
        self.tool_name = tool_name
