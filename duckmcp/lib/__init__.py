"""MCP tool implementations and utilities.

The dispatcher lives in ``duckmcp.lib.mcp_tools`` and the tools in
``duckmcp.lib.tools``; they are not re-exported here because the services
package imports logging from this package.
"""

from .logging_config import setup_logging, get_logger

__all__ = [
    'setup_logging',
    'get_logger'
]
