"""Health monitoring API service."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException

from duckmcp import __version__

logger = logging.getLogger(__name__)


class HealthAPI:
    """Health monitoring API running beside the MCP transport.

    Only pure accessors of the database service are used here: the DuckDB
    session belongs to the MCP side and is never queried from this thread.
    """

    def __init__(self, db_service=None, dispatcher=None, host: str = "127.0.0.1", port: int = 8080):
        """Initialize health API service.

        Args:
            db_service: Database service whose connection state is reported
            dispatcher: Tool dispatcher whose call counters are reported
            host: Host to bind the health API to
            port: Port to bind the health API to
        """
        self.db_service = db_service
        self.dispatcher = dispatcher
        self.host = host
        self.port = port
        self.app = FastAPI(title="DuckDB MCP Health API", version=__version__)
        self.start_time = datetime.now()

        self._setup_routes()

    def _setup_routes(self):
        """Set up FastAPI routes for health monitoring."""

        @self.app.get("/health")
        async def health_check() -> Dict[str, Any]:
            """Overall system health status."""
            uptime = (datetime.now() - self.start_time).total_seconds()
            return {
                "status": "healthy" if self._database_connected() else "degraded",
                "timestamp": datetime.now().isoformat(),
                "uptime_seconds": uptime,
                "version": __version__
            }

        @self.app.get("/health/database")
        async def database_health() -> Dict[str, Any]:
            """Engine session status."""
            if not self.db_service:
                return {
                    "status": "unavailable",
                    "message": "Database service not configured"
                }

            config = self.db_service.get_config()
            connected = self.db_service.is_connected()
            return {
                "status": "healthy" if connected else "unhealthy",
                "connected": connected,
                "mode": config.mode,
                "path": config.path,
                "readonly": config.readonly,
                "timestamp": datetime.now().isoformat()
            }

        @self.app.get("/health/metrics")
        async def health_metrics() -> Dict[str, Any]:
            """Tool call counters."""
            uptime = (datetime.now() - self.start_time).total_seconds()
            calls = getattr(self.dispatcher, 'call_count', 0)
            errors = getattr(self.dispatcher, 'error_count', 0)
            return {
                "metrics": {
                    "total_calls": calls,
                    "total_errors": errors,
                    "error_rate": errors / max(calls, 1),
                    "uptime_seconds": uptime
                },
                "timestamp": datetime.now().isoformat()
            }

        @self.app.get("/health/ready")
        async def readiness_check() -> Dict[str, Any]:
            """Readiness probe for container orchestration."""
            if not self._database_connected():
                raise HTTPException(
                    status_code=503,
                    detail="Service not ready: database connection unavailable"
                )
            return {
                "ready": True,
                "timestamp": datetime.now().isoformat()
            }

        @self.app.get("/health/live")
        async def liveness_check() -> Dict[str, Any]:
            """Liveness probe for container orchestration."""
            return {
                "alive": True,
                "timestamp": datetime.now().isoformat()
            }

    def _database_connected(self) -> bool:
        return bool(self.db_service and self.db_service.is_connected())

    def run(self, log_level: Optional[str] = "warning"):
        """Run the health API server (blocking)."""
        logger.info(f"Starting Health API on {self.host}:{self.port}")

        try:
            uvicorn.run(
                self.app,
                host=self.host,
                port=self.port,
                log_level=log_level
            )
        except KeyboardInterrupt:
            logger.info("Health API shutdown requested")
        except Exception as e:
            logger.error(f"Health API error: {e}")
            raise
