"""Target detection and view registration for directory targets.

A directory target is scanned for data files of each supported extension.
Every extension with at least one match becomes one view, registered with the
engine's multi-file readers so type detection and hive partition columns come
from DuckDB itself. Registration tries an ordered list of strategies and stops
at the first that succeeds; one extension failing never stops the others.
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from duckmcp.lib.logging_config import get_logger
from duckmcp.models.config import DatabaseConfig
from duckmcp.models.error_types import MCPError, PathNotFoundError, UnsupportedFileTypeError
from duckmcp.services.database_service import DatabaseService
from duckmcp.services.query_utils import (
    escape_identifier,
    quote_literal,
    quote_literal_list,
    to_engine_path,
    view_name_for,
)

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = ('csv', 'parquet', 'json', 'jsonl')
DATABASE_FILE_EXTENSIONS = ('.db', '.duckdb', '.sqlite')

# extension -> (reader function, extra reader options)
READERS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    'csv': ('read_csv', ('auto_detect=true',)),
    'parquet': ('read_parquet', ()),
    'json': ('read_json', ('auto_detect=true',)),
    'jsonl': ('read_json', ('auto_detect=true',)),
}

# A strategy turns (extension, directory, matched files) into a read expression
Strategy = Callable[[str, Path, List[Path]], str]


def _reader_call(extension: str, source: str, *options: str) -> str:
    reader, defaults = READERS[extension]
    args = [source, *defaults, *options]
    return f"{reader}({', '.join(args)})"


def glob_source(extension: str, directory: Path, files: List[Path]) -> str:
    """Read every file under the directory with one recursive glob.

    Hive-style ``key=value`` directories become columns.
    """
    pattern = to_engine_path(directory / '**' / f'*.{extension}')
    return _reader_call(extension, quote_literal(pattern), 'hive_partitioning=true')


def file_list_source(extension: str, directory: Path, files: List[Path]) -> str:
    """Read the matched files explicitly, unifying columns by name."""
    paths = [to_engine_path(f) for f in files]
    if len(paths) == 1:
        return _reader_call(extension, quote_literal(paths[0]))
    return _reader_call(extension, quote_literal_list(paths), 'union_by_name=true')


DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (glob_source, file_list_source)


class DataLoader:
    """Registers data files of a directory target as queryable views."""

    def __init__(self, db_service: DatabaseService, config: DatabaseConfig,
                 strategies: Optional[Tuple[Strategy, ...]] = None):
        """Initialize the loader.

        Args:
            db_service: Connected database service
            config: Target configuration
            strategies: Registration strategies in the order they are tried
        """
        self.db_service = db_service
        self.config = config
        self.strategies = strategies or DEFAULT_STRATEGIES
        self.loaded_views: Dict[str, str] = {}

    @staticmethod
    def detect_path_type(path: str) -> DatabaseConfig:
        """Classify the target path.

        Args:
            path: Database file or data directory

        Returns:
            DatabaseConfig for the target

        Raises:
            PathNotFoundError: If the path does not exist
            UnsupportedFileTypeError: If a file is not a database file
        """
        target = Path(path)
        if not target.exists():
            raise PathNotFoundError(path)

        if target.is_dir():
            return DatabaseConfig(path=path, is_directory=True, readonly=True)

        extension = target.suffix.lower()
        if extension not in DATABASE_FILE_EXTENSIONS:
            raise UnsupportedFileTypeError(path, extension)

        return DatabaseConfig(path=path, is_directory=False, readonly=True)

    async def load_data(self) -> Dict[str, str]:
        """Register views for a directory target.

        Database file targets need nothing: the engine owns the file.

        Returns:
            Mapping of registered view name to its read expression
        """
        if not self.config.is_directory:
            return self.loaded_views

        directory = Path(self.config.path)
        # Sequential on purpose: one CREATE VIEW at a time against the session
        for extension in SUPPORTED_EXTENSIONS:
            files = self.find_files(directory, extension)
            logger.info(f"Found {len(files)} {extension} files in {directory}")
            if not files:
                continue
            await self.register_extension(extension, directory, files)

        logger.info(f"Registered {len(self.loaded_views)} views: {sorted(self.loaded_views)}")
        return self.loaded_views

    @staticmethod
    def find_files(directory: Path, extension: str) -> List[Path]:
        """Find files with the extension directly in and below the directory."""
        matches = set(directory.glob(f'*.{extension}'))
        matches.update(directory.glob(f'**/*.{extension}'))
        return sorted(p for p in matches if p.is_file())

    async def register_extension(self, extension: str, directory: Path, files: List[Path]) -> Optional[str]:
        """Register one view for all files of an extension.

        Returns:
            The view name, or None if every strategy failed
        """
        view_name = view_name_for(directory, extension)

        for strategy in self.strategies:
            source = strategy(extension, directory, files)
            sql = f"CREATE OR REPLACE VIEW {escape_identifier(view_name)} AS SELECT * FROM {source}"
            try:
                await self.db_service.execute(sql)
            except MCPError as e:
                logger.warning(
                    f"Strategy {strategy.__name__} failed for view '{view_name}': {e.message}"
                )
                continue

            self.loaded_views[view_name] = source
            logger.info(
                f"Created view '{view_name}' for {len(files)} {extension} files using {strategy.__name__}"
            )
            return view_name

        logger.error(f"Skipping {extension} files: could not create view '{view_name}'")
        return None
