"""Engine and target services for DuckDB MCP Server."""

from .database_service import DatabaseService
from .data_loader import DataLoader
from .query_utils import escape_identifier, sanitize_name, view_name_for

__all__ = [
    'DatabaseService',
    'DataLoader',
    'escape_identifier',
    'sanitize_name',
    'view_name_for'
]
