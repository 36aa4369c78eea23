"""Data models for DuckDB MCP Server."""

from .config import DatabaseConfig, ServerSettings
from .error_types import (
    MCPError,
    PathNotFoundError,
    UnsupportedFileTypeError,
    ConnectionError,
    QueryError,
    ExecutionError,
    SummarizeError,
    UnknownToolError
)

__all__ = [
    'DatabaseConfig',
    'ServerSettings',
    'MCPError',
    'PathNotFoundError',
    'UnsupportedFileTypeError',
    'ConnectionError',
    'QueryError',
    'ExecutionError',
    'SummarizeError',
    'UnknownToolError'
]
