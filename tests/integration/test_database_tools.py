"""End-to-end tool scenarios against real DuckDB targets."""

import json

import pytest
import pytest_asyncio

from duckmcp.lib.mcp_tools import ToolDispatcher
from duckmcp.models.error_types import SummarizeError
from duckmcp.services.data_loader import DataLoader
from duckmcp.services.database_service import DatabaseService


@pytest_asyncio.fixture
async def directory_dispatcher(sample_data_dir):
    """Dispatcher over the sample data directory."""
    config = DataLoader.detect_path_type(str(sample_data_dir))
    service = DatabaseService(config)
    await service.connect()
    loader = DataLoader(service, config)
    await loader.load_data()
    yield ToolDispatcher.from_service(service, loader.loaded_views)
    await service.close()


@pytest_asyncio.fixture
async def file_dispatcher(file_service):
    """Dispatcher over the sample database file."""
    return ToolDispatcher.from_service(file_service)


class TestDirectoryScenario:
    """Tool calls against a directory of data files."""

    @pytest.mark.asyncio
    async def test_get_tables(self, directory_dispatcher):
        response = await directory_dispatcher.call_tool('get_tables', {})
        tables = json.loads(response.first_text)

        assert [t['name'] for t in tables] == ['data_csv', 'data_json', 'data_parquet']
        assert all(t['type'] == 'VIEW' for t in tables)
        assert all(t['schema'] == 'main' for t in tables)
        assert tables[0]['source'].startswith('read_csv(')

    @pytest.mark.asyncio
    async def test_get_schema(self, directory_dispatcher):
        response = await directory_dispatcher.call_tool('get_schema', {'table_name': 'data_csv'})
        schema = json.loads(response.first_text)

        assert schema['table_name'] == 'data_csv'
        assert [c['name'] for c in schema['columns']] == ['id', 'name', 'email', 'city', 'notes']

    @pytest.mark.asyncio
    async def test_describe_table(self, directory_dispatcher):
        response = await directory_dispatcher.call_tool('describe_table', {'table_name': 'data_csv'})
        description = json.loads(response.first_text)

        assert description['rowCount'] == 10
        assert len(description['schema']['columns']) == 5

    @pytest.mark.asyncio
    async def test_query_quoted_and_null_values(self, directory_dispatcher):
        """Test escaped quotes, non-ASCII text and NULL rendering."""
        response = await directory_dispatcher.call_tool('execute_query', {
            'sql': 'SELECT id, name FROM data_csv WHERE id IN (1, 4, 5) ORDER BY id'
        })

        text = response.first_text
        assert response.is_error is False
        assert 'John "Johnny" Doe' in text
        assert 'María González' in text
        assert 'NULL' in text
        assert '\n3 rows (' in text

    @pytest.mark.asyncio
    async def test_query_json_view(self, directory_dispatcher):
        response = await directory_dispatcher.call_tool('execute_query', {
            'sql': 'SELECT sale_id, total_amount, status FROM data_json ORDER BY sale_id'
        })

        text = response.first_text
        assert '1001' in text
        assert '483.75' in text
        assert 'completed' in text
        assert '\n3 rows (' in text

    @pytest.mark.asyncio
    async def test_query_limit(self, directory_dispatcher):
        response = await directory_dispatcher.call_tool('execute_query', {
            'sql': 'SELECT * FROM data_csv ORDER BY id',
            'limit': 3
        })

        assert '... and 7 more rows' in response.first_text
        assert '\n10 rows (' in response.first_text

    @pytest.mark.asyncio
    async def test_empty_query(self, directory_dispatcher):
        response = await directory_dispatcher.call_tool('execute_query', {
            'sql': 'SELECT * FROM data_csv WHERE id > 1000'
        })

        assert response.first_text == 'No results returned.'

    @pytest.mark.asyncio
    async def test_summarize_table(self, directory_dispatcher):
        response = await directory_dispatcher.call_tool('summarize_table', {'table_name': 'data_parquet'})

        text = response.first_text
        assert text.startswith('Table Summary\n')
        assert 'Column: trip_id (BIGINT)' in text
        assert 'Column: distance_km (DOUBLE)' in text
        assert 'Count: 20' in text

    @pytest.mark.asyncio
    async def test_database_info(self, directory_dispatcher):
        response = await directory_dispatcher.call_tool('get_database_info', {})
        info = json.loads(response.first_text)

        assert info['readonly'] is True
        assert info['totalTables'] == 3
        assert info['version'].startswith('v')

    @pytest.mark.asyncio
    async def test_summarize_numeric_statistics(self, directory_dispatcher):
        """Test that SUMMARIZE statistics on a numeric column survive coercion."""
        summaries = await directory_dispatcher.summarize_tools.summarize_table('data_parquet')
        distance = next(s for s in summaries if s.column_name == 'distance_km')

        assert distance.avg == pytest.approx(26.25)
        for field in ('std', 'q25', 'q50', 'q75'):
            assert getattr(distance, field) is not None

        text = directory_dispatcher.summarize_tools.format_summary(summaries)
        for label in ('Avg: 26.25', 'Std: ', 'Q25: ', 'Median: ', 'Q75: '):
            assert label in text


class TestSummarizeColumn:
    """Explicit per-column aggregates against a real session."""

    @pytest.mark.asyncio
    async def test_numeric_column(self, directory_dispatcher):
        result = await directory_dispatcher.summarize_tools.summarize_column('data_csv', 'id')

        assert result.column_name == 'id'
        assert result.count == 10
        assert result.avg == pytest.approx(5.5)
        assert float(result.q25) == pytest.approx(3.25)
        assert float(result.q50) == pytest.approx(5.5)
        assert float(result.q75) == pytest.approx(7.75)
        assert result.null_percentage == pytest.approx(0.0)

    @pytest.mark.asyncio
    async def test_text_column(self, directory_dispatcher):
        """Test that non-numeric values give no numeric statistics."""
        result = await directory_dispatcher.summarize_tools.summarize_column('data_csv', 'name')

        assert result.column_type == 'VARCHAR'
        assert result.count == 9
        assert result.null_percentage == pytest.approx(10.0)
        assert result.avg is None
        assert result.std is None
        assert result.q25 is None
        assert result.q50 is None
        assert result.q75 is None

    @pytest.mark.asyncio
    async def test_missing_column(self, directory_dispatcher):
        with pytest.raises(SummarizeError) as exc_info:
            await directory_dispatcher.summarize_tools.summarize_column('data_csv', 'nope')

        assert exc_info.value.column_name == 'nope'
        assert 'Failed to summarize column "nope" in table "data_csv"' in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_table(self, directory_dispatcher):
        """Test that a table without rows has no null share and does not fail."""
        service = directory_dispatcher.summarize_tools.db_service
        await service.execute("CREATE TABLE empty_trips AS SELECT * FROM data_parquet LIMIT 0")

        result = await directory_dispatcher.summarize_tools.summarize_column('empty_trips', 'distance_km')

        assert result.count == 0
        assert result.null_percentage is None
        assert result.avg is None


class TestDatabaseFileScenario:
    """Tool calls against a DuckDB database file."""

    @pytest.mark.asyncio
    async def test_tables_and_views(self, file_dispatcher):
        response = await file_dispatcher.call_tool('get_tables', {})
        tables = {t['name']: t for t in json.loads(response.first_text)}

        assert tables['people']['type'] == 'TABLE'
        assert tables['scores']['type'] == 'TABLE'
        assert tables['high_scores']['type'] == 'VIEW'
        assert 'source' not in tables['people']

    @pytest.mark.asyncio
    async def test_schema_nullable_and_default(self, file_dispatcher):
        response = await file_dispatcher.call_tool('get_schema', {'table_name': 'scores'})
        columns = {c['name']: c for c in json.loads(response.first_text)['columns']}

        assert columns['id']['nullable'] is False
        assert columns['player']['nullable'] is True
        assert 'default_value' in columns['score']

    @pytest.mark.asyncio
    async def test_write_rejected(self, file_dispatcher):
        """Test that the engine's read-only mode blocks writes."""
        response = await file_dispatcher.call_tool('execute_query', {'sql': 'DELETE FROM scores'})

        assert response.is_error is True
        assert response.first_text.startswith('Error: Query execution failed (')
        assert 'read-only' in response.first_text.lower()

    @pytest.mark.asyncio
    async def test_missing_table(self, file_dispatcher):
        response = await file_dispatcher.call_tool('describe_table', {'table_name': 'missing'})

        assert response.is_error is True
        assert response.first_text.startswith('Error: Query failed:')

    @pytest.mark.asyncio
    async def test_summarize_missing_table(self, file_dispatcher):
        response = await file_dispatcher.call_tool('summarize_table', {'table_name': 'missing'})

        assert response.is_error is True
        assert response.first_text.startswith('Error: Failed to summarize table "missing":')

    @pytest.mark.asyncio
    async def test_syntax_error(self, file_dispatcher):
        response = await file_dispatcher.call_tool('execute_query', {'sql': 'SELEC 1'})

        assert response.is_error is True
        assert 'syntax error' in response.first_text.lower()
