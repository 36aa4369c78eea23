"""Shared fixtures for DuckDB MCP Server tests."""

import shutil
from pathlib import Path
from unittest.mock import Mock

import duckdb
import pytest
import pytest_asyncio

from duckmcp.models.config import DatabaseConfig
from duckmcp.services.database_service import DatabaseService
from duckmcp.services.query_utils import quote_literal, to_engine_path

DATA_DIR = Path(__file__).parent / 'data'


def write_trips_parquet(path: Path, rows: int = 20):
    """Generate a small trips table as a parquet file."""
    con = duckdb.connect()
    try:
        con.execute(f"""
            COPY (
                SELECT
                    i AS trip_id,
                    'route_' || CAST(i % 3 AS VARCHAR) AS route,
                    CAST(i * 2.5 AS DOUBLE) AS distance_km,
                    CAST(i % 4 + 1 AS INTEGER) AS passengers
                FROM range(1, {rows + 1}) t(i)
            ) TO {quote_literal(to_engine_path(path))} (FORMAT PARQUET)
        """)
    finally:
        con.close()


@pytest.fixture
def sample_data_dir(tmp_path):
    """Directory named ``data`` holding people.csv, sales.json and trips.parquet."""
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    shutil.copy(DATA_DIR / 'people.csv', data_dir / 'people.csv')
    shutil.copy(DATA_DIR / 'sales.json', data_dir / 'sales.json')
    write_trips_parquet(data_dir / 'trips.parquet')
    return data_dir


@pytest.fixture
def database_file(tmp_path):
    """DuckDB database file with two tables and a view."""
    path = tmp_path / 'sample.duckdb'
    people_csv = quote_literal(to_engine_path(DATA_DIR / 'people.csv'))

    con = duckdb.connect(str(path))
    try:
        con.execute(f"CREATE TABLE people AS SELECT * FROM read_csv({people_csv}, auto_detect=true)")
        con.execute("""
            CREATE TABLE scores (
                id INTEGER NOT NULL,
                player VARCHAR,
                score DOUBLE DEFAULT 0
            )
        """)
        con.execute("INSERT INTO scores VALUES (1, 'ann', 10.5), (2, 'ben', NULL), (3, 'cy', 7.0)")
        con.execute("CREATE VIEW high_scores AS SELECT * FROM scores WHERE score > 8")
    finally:
        con.close()

    return path


@pytest_asyncio.fixture
async def file_service(database_file):
    """Connected read-only service over the database file."""
    service = DatabaseService(DatabaseConfig(path=str(database_file), is_directory=False))
    await service.connect()
    yield service
    await service.close()


@pytest.fixture
def mock_db_service():
    """Database service mock; its async methods are AsyncMock, the rest plain mocks."""
    mock = Mock(spec=DatabaseService)
    mock.get_config.return_value = DatabaseConfig(path='/srv/data', is_directory=True)
    mock.is_connected.return_value = True
    return mock
