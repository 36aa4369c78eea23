"""SQL quoting and naming helpers for statements built from names and paths."""

import re
from pathlib import Path
from typing import Iterable, Union


def escape_identifier(identifier: str) -> str:
    """Quote a SQL identifier, doubling any embedded double quotes.

    Args:
        identifier: Identifier to quote

    Returns:
        Quoted identifier
    """
    return '"' + identifier.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """Quote a string literal, doubling any embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def quote_literal_list(values: Iterable[str]) -> str:
    """Render a list literal of quoted strings, e.g. ``['a', 'b']``."""
    return '[' + ', '.join(quote_literal(v) for v in values) + ']'


def sanitize_name(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_]`` with an underscore.

    Args:
        name: Raw name, typically a directory base name

    Returns:
        SQL-safe name
    """
    return re.sub(r'[^a-zA-Z0-9_]', '_', name)


def view_name_for(directory: Union[str, Path], extension: str) -> str:
    """Derive the view name for files of one extension under a directory.

    The name is the sanitized base name of the directory plus the extension,
    so directory ``data`` and ``csv`` give ``data_csv``.
    """
    path = Path(directory)
    base_name = path.name or path.resolve().name
    return f"{sanitize_name(base_name)}_{extension}"


def to_engine_path(path: Union[str, Path]) -> str:
    """Render a filesystem path with forward slashes for engine reader functions."""
    return str(path).replace('\\', '/')
