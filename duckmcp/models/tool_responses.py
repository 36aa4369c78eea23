"""Pydantic models for MCP tool responses.

This module defines the catalog, query and summary projections returned by the
tools. Python attribute names are snake_case; the JSON field names clients see
are set through aliases so the wire format stays stable.
"""

import json
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ToolModel(BaseModel):
    """Base model for every tool payload."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Dump to JSON-compatible primitives using wire field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Render as indented JSON text for a tool content item."""
        return json.dumps(self.to_wire(), indent=2, ensure_ascii=False)


# ============================================================================
# Catalog response models
# ============================================================================

class TableInfo(ToolModel):
    """A table or view visible in the engine catalog."""

    name: str = Field(..., description="Table or view name")
    schema_name: str = Field(..., alias="schema", description="Schema the object lives in")
    type: Literal["TABLE", "VIEW"] = Field(..., description="Object kind")
    source: Optional[str] = Field(None, description="Read expression for loader-registered views")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "data_csv",
                "schema": "main",
                "type": "VIEW",
                "source": "read_csv('/srv/data/**/*.csv', auto_detect=true, hive_partitioning=true)"
            }
        }
    )


class ColumnInfo(ToolModel):
    """A single column of a table schema."""

    name: str = Field(..., description="Column name")
    type: str = Field(..., description="Engine data type")
    nullable: bool = Field(..., description="Whether NULL values are allowed")
    default_value: Optional[str] = Field(None, description="Column default expression")


class TableSchema(ToolModel):
    """Ordered column list for a table."""

    table_name: str = Field(..., description="Table name")
    columns: List[ColumnInfo] = Field(default_factory=list, description="Columns in declared order")


class TableDescription(ToolModel):
    """Schema plus row count for a table."""

    table_schema: TableSchema = Field(..., alias="schema", description="Table schema")
    row_count: int = Field(..., ge=0, alias="rowCount", description="Number of rows")


class DatabaseInfo(ToolModel):
    """General information about the engine session."""

    version: str = Field(..., description="Engine version string")
    tables: List[TableInfo] = Field(default_factory=list, description="All tables and views")
    total_tables: int = Field(..., ge=0, alias="totalTables", description="Number of tables and views")
    readonly: bool = Field(..., description="Whether the target is exposed read-only")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "version": "v1.1.3",
                "tables": [{"name": "data_csv", "schema": "main", "type": "VIEW"}],
                "totalTables": 1,
                "readonly": True
            }
        }
    )


# ============================================================================
# Query response models
# ============================================================================

class QueryResult(ToolModel):
    """Columnar envelope for a query result."""

    columns: List[str] = Field(default_factory=list, description="Column names in result order")
    rows: List[List[Any]] = Field(default_factory=list, description="Rows laid out in column order")
    row_count: int = Field(0, ge=0, alias="rowCount", description="Number of rows returned")
    execution_time: Optional[float] = Field(
        None, ge=0, alias="executionTime", description="Wall-clock latency in milliseconds"
    )


class QueryValidation(ToolModel):
    """Outcome of validating a statement with EXPLAIN."""

    valid: bool = Field(..., description="Whether the statement can be planned")
    error: Optional[str] = Field(None, description="Engine error when invalid")


# ============================================================================
# Summary response models
# ============================================================================

class SummaryResult(ToolModel):
    """Statistics for one column; fields absent when not applicable."""

    column_name: str = Field(..., description="Column name")
    column_type: Optional[str] = Field(None, description="Engine data type")
    min: Optional[Any] = Field(None, description="Minimum value")
    max: Optional[Any] = Field(None, description="Maximum value")
    approx_unique: Optional[int] = Field(None, ge=0, description="Approximate distinct count")
    avg: Optional[Union[float, str]] = Field(None, description="Average")
    std: Optional[Union[float, str]] = Field(None, description="Standard deviation")
    q25: Optional[Any] = Field(None, description="25th percentile")
    q50: Optional[Any] = Field(None, description="Median")
    q75: Optional[Any] = Field(None, description="75th percentile")
    count: Optional[int] = Field(None, ge=0, description="Number of rows or non-null values")
    null_percentage: Optional[Union[float, str]] = Field(None, description="Share of NULL values")

    @field_validator('avg', 'std', 'null_percentage', mode='before')
    @classmethod
    def coerce_numeric(cls, v):
        """SUMMARIZE reports these as DECIMAL or VARCHAR; keep floats where possible."""
        if v is None or isinstance(v, bool):
            return v
        if isinstance(v, (int, float, Decimal)):
            return float(v)
        if isinstance(v, str):
            try:
                return float(v)
            except ValueError:
                return v
        return str(v)


# ============================================================================
# Dispatcher response models
# ============================================================================

class TextContent(ToolModel):
    """A text content item of a tool response."""

    type: Literal["text"] = "text"
    text: str


class ToolResponse(ToolModel):
    """Envelope returned by the tool dispatcher."""

    content: List[TextContent] = Field(default_factory=list)
    is_error: bool = Field(False, alias="isError")

    @classmethod
    def from_text(cls, text: str) -> "ToolResponse":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def from_error(cls, message: str) -> "ToolResponse":
        return cls(content=[TextContent(text=f"Error: {message}")], is_error=True)

    @property
    def first_text(self) -> str:
        return self.content[0].text if self.content else ""


__all__ = [
    'ToolModel',
    # Catalog models
    'TableInfo',
    'ColumnInfo',
    'TableSchema',
    'TableDescription',
    'DatabaseInfo',
    # Query models
    'QueryResult',
    'QueryValidation',
    # Summary models
    'SummaryResult',
    # Dispatcher models
    'TextContent',
    'ToolResponse'
]
