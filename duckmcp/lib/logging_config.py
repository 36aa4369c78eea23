"""Structured logging configuration with JSON formatter.

Handlers write to stderr: in stdio mode stdout carries the JSON-RPC stream.
Engine statements run on the service's ``duckdb`` worker thread, so records
carry the thread name in both text and JSON output.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Union

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s [%(threadName)s] - %(message)s'

# Libraries that log every request at INFO
NOISY_LOGGERS = ('uvicorn.access', 'httpx', 'mcp.server.lowlevel.server')

MAX_QUERY_LOG_LENGTH = 500
MAX_ARGUMENT_LOG_LENGTH = 200


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as one JSON object.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_obj = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'thread': record.threadName,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            log_obj.update(extra_fields)

        # Engine values (Decimal, date, UUID) are not JSON types
        return json.dumps(log_obj, default=str, ensure_ascii=False)


def setup_logging(
    level: Union[str, int] = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """Configure the root logger for the server process.

    Existing root handlers are replaced. Request-level loggers of the HTTP and
    MCP libraries are held at WARNING unless DEBUG is requested.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number
        json_format: Whether to use JSON formatting
        log_file: Optional log file path, written in addition to stderr
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if isinstance(level, int):
        log_level = level
    else:
        log_level = getattr(logging, str(level).upper(), logging.INFO)
    root_logger.setLevel(log_level)

    formatter = JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    library_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


class ExtraAdapter(logging.LoggerAdapter):
    """Adapter attaching fixed extra fields, merged with per-call ones."""

    def process(self, msg, kwargs):
        fields = dict(self.extra)
        call_extra = kwargs.pop('extra', None) or {}
        fields.update(call_extra.get('extra_fields', {}))
        kwargs['extra'] = {'extra_fields': fields}
        return msg, kwargs


def get_logger(name: str, extra_fields: Optional[Dict[str, Any]] = None):
    """Get a logger, wrapped in an ExtraAdapter when extra fields are given.

    Args:
        name: Logger name
        extra_fields: Fields added to every record in JSON output

    Returns:
        Logger or ExtraAdapter
    """
    logger = logging.getLogger(name)

    if extra_fields:
        return ExtraAdapter(logger, extra_fields)

    return logger


def _shorten(text: str, limit: int) -> str:
    text = ' '.join(text.split())
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def log_database_query(query: str, params=None, logger_instance: Optional[logging.Logger] = None):
    """Log an engine statement at DEBUG level.

    Args:
        query: SQL statement
        params: Statement parameters
        logger_instance: Logger to use (defaults to this module's logger)
    """
    if logger_instance is None:
        logger_instance = logging.getLogger(__name__)

    display_query = _shorten(query, MAX_QUERY_LOG_LENGTH)

    if params:
        logger_instance.debug(f"SQL Query: {display_query} | Params: {params}")
    else:
        logger_instance.debug(f"SQL Query: {display_query}")


def log_tool_call(name: str, arguments: Dict[str, Any], logger_instance: Optional[logging.Logger] = None):
    """Log an incoming tool call at INFO level with shortened arguments."""
    if logger_instance is None:
        logger_instance = logging.getLogger(__name__)

    shown = {
        key: _shorten(value, MAX_ARGUMENT_LOG_LENGTH) if isinstance(value, str) else value
        for key, value in arguments.items()
    }
    logger_instance.info(f"Tool call: {name} {shown}" if shown else f"Tool call: {name}")


def log_error_with_context(error: Exception, context: dict, logger_instance: Optional[logging.Logger] = None):
    """Log an error with additional context information.

    Args:
        error: Exception that occurred
        context: Dictionary with context information
        logger_instance: Logger to use (defaults to this module's logger)
    """
    if logger_instance is None:
        logger_instance = logging.getLogger(__name__)

    logger_instance.error(
        f"{error.__class__.__name__}: {error} | Context: {context}",
        exc_info=True
    )
