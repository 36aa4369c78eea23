"""Unit tests for error types."""

import pytest

from duckmcp.models.error_types import (
    ConnectionError,
    ExecutionError,
    MCPError,
    PathNotFoundError,
    QueryError,
    SummarizeError,
    UnknownToolError,
    UnsupportedFileTypeError,
)


class TestErrorTypes:
    """Unit tests for error messages and recoverability."""

    def test_path_not_found(self):
        error = PathNotFoundError('/missing')

        assert error.message == "Path does not exist: /missing"
        assert str(error) == error.message
        assert error.path == '/missing'
        assert error.recoverable is False

    def test_unsupported_file_type(self):
        error = UnsupportedFileTypeError('data.csv', '.csv')

        assert error.message == (
            "Unsupported file type: .csv. Use .db, .duckdb, .sqlite, or specify a directory."
        )
        assert error.extension == '.csv'
        assert error.recoverable is False

    def test_unsupported_file_without_extension(self):
        error = UnsupportedFileTypeError('Makefile', '')
        assert error.message.startswith("Unsupported file type: (none).")

    def test_connection_error_is_recoverable(self):
        assert ConnectionError("Failed to connect").recoverable is True

    def test_execution_error_is_a_query_error(self):
        error = ExecutionError("Execution failed: read-only")

        assert isinstance(error, QueryError)
        assert isinstance(error, MCPError)
        assert error.recoverable is True

    def test_summarize_error(self):
        error = SummarizeError('people', 'Column "age" not found', column_name='age')

        assert error.table_name == 'people'
        assert error.column_name == 'age'
        assert error.recoverable is False

    def test_unknown_tool(self):
        error = UnknownToolError('drop_everything')

        assert error.message == "Unknown tool: drop_everything"
        assert error.tool_name == 'drop_everything'

    @pytest.mark.parametrize("error", [
        PathNotFoundError('/x'),
        QueryError('q'),
        SummarizeError('t', 'm'),
        UnknownToolError('x'),
    ])
    def test_all_errors_are_mcp_errors(self, error):
        assert isinstance(error, MCPError)
