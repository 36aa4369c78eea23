"""MCP Tools Package - tool implementations for DuckDB operations.

Structure:
- metadata.py: Catalog operations (tables, schemas, row counts, engine info)
- query.py: Query execution and result formatting
- summarize.py: Statistical summaries
"""

from .metadata import MetadataTools
from .query import QueryTools
from .summarize import SummarizeTools

__all__ = [
    'MetadataTools',
    'QueryTools',
    'SummarizeTools'
]
