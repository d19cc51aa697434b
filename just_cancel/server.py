"""
Just Cancel MCP Server

Main entry point for the HTTP server that exposes the ``just-cancel``
subscription analysis tool to AI assistants via the Model Context Protocol.

Features:
- MCP over Server-Sent Events (GET /mcp + POST /mcp/messages)
- Subscription detection from pasted text and uploaded statements
- Append-only analytics event log with threshold alerts
- Widget tracking and PDF extraction endpoints

Usage:
    python -m just_cancel.server
    # or
    just-cancel-server
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from .analytics.alerts import evaluate_alerts
from .analytics.event_log import EventLog
from .catalog import Catalog
from .client.extraction import PdfPlumberExtractor, TextExtractor
from .client.file_client import StatementFileClient
from .config import JustCancelConfig, config
from .dispatcher import ProtocolDispatcher
from .logging_config import get_logger
from .mcp_server import create_mcp_server
from .routes import analytics_routes, extract_pdf_routes, health_routes, track_routes
from .sessions import SessionRegistry
from .transport import MessageEndpoint, SseEndpoint, SseTransport

logger = get_logger(__name__)


# ============================================================================
# Alert Monitoring
# ============================================================================


async def check_alerts(event_log: EventLog, window_days: int) -> int:
    """
    Evaluate alerts once and log each active one.

    Returns:
        Number of active alerts
    """
    entries = await event_log.read_recent(days=window_days)
    alerts = evaluate_alerts(entries)
    for alert in alerts:
        logger.warning(f"[ALERT] {alert.severity.value.upper()} {alert.id}: {alert.message}")
    return len(alerts)


async def monitor_alerts(event_log: EventLog, interval: int, window_days: int):
    """Evaluate alerts every ``interval`` seconds until cancelled."""
    while True:
        try:
            await check_alerts(event_log, window_days)
        except Exception as e:
            logger.exception(f"Alert check failed: {e}")
        await asyncio.sleep(interval)


# ============================================================================
# Server Lifecycle Management
# ============================================================================


@asynccontextmanager
async def app_lifespan(app: Starlette) -> AsyncIterator[None]:
    """
    Server lifecycle management.

    Handles:
    - Configuration validation on startup
    - Background alert monitoring
    - Cleanup on shutdown
    """
    logger.info("Just Cancel server starting...")
    app_config = app.state.config

    is_valid, error = app_config.validate()
    if not is_valid:
        logger.error(f"Invalid configuration: {error}")
        raise ValueError(f"Configuration error: {error}")

    logger.info(f"Configuration: {app_config.get_summary()}")

    monitor = asyncio.create_task(
        monitor_alerts(
            app.state.event_log,
            app_config.ALERT_CHECK_INTERVAL_SECONDS,
            app_config.ALERT_WINDOW_DAYS,
        )
    )
    logger.info("Just Cancel server started successfully")

    try:
        yield
    finally:
        logger.info("Just Cancel server shutting down...")
        monitor.cancel()
        try:
            await monitor
        except asyncio.CancelledError:
            pass
        app.state.file_client.close()
        logger.info("Just Cancel server stopped")


# ============================================================================
# Application Assembly
# ============================================================================


def create_app(
    app_config: type[JustCancelConfig] | JustCancelConfig = config,
    catalog: Catalog | None = None,
    extractor: TextExtractor | None = None,
    file_client: StatementFileClient | None = None,
) -> Starlette:
    """
    Build the Starlette application.

    Args:
        app_config: Configuration (defaults to the process-wide config)
        catalog: Tool/resource catalog (defaults to widgets read from ASSETS_DIR)
        extractor: PDF text extractor (defaults to pdfplumber)
        file_client: Statement file client

    Returns:
        ASGI application
    """
    catalog = catalog or Catalog.from_assets(app_config.ASSETS_DIR, app_config.WIDGET_VERSION)
    extractor = extractor or PdfPlumberExtractor()
    file_client = file_client or StatementFileClient(timeout=app_config.FILE_FETCH_TIMEOUT)
    event_log = EventLog(app_config.ANALYTICS_LOG_DIR)

    dispatcher = ProtocolDispatcher(catalog, event_log, file_client, extractor)
    mcp_server = create_mcp_server(dispatcher)

    registry = SessionRegistry()
    transport = SseTransport(registry, app_config.POST_PATH)

    routes = [
        Route(app_config.SSE_PATH, SseEndpoint(transport, mcp_server), methods=["GET"]),
        Route(app_config.POST_PATH, MessageEndpoint(transport), methods=["POST"]),
        *health_routes,
        *analytics_routes,
        *track_routes,
        *extract_pdf_routes,
    ]

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["content-type"],
        )
    ]

    app = Starlette(routes=routes, middleware=middleware, lifespan=app_lifespan)
    app.state.config = app_config
    app.state.catalog = catalog
    app.state.event_log = event_log
    app.state.extractor = extractor
    app.state.file_client = file_client
    app.state.dispatcher = dispatcher
    app.state.sessions = registry

    return app


# ============================================================================
# Server Entry Point
# ============================================================================


def main():
    """
    Main entry point for the server.

    Serves the ASGI app with uvicorn on HOST:PORT.
    """
    app = create_app()
    logger.info(f"Starting Just Cancel server on http://{config.HOST}:{config.PORT}")
    logger.info(f"  SSE stream: GET {config.SSE_PATH}")
    logger.info(f"  Message post endpoint: POST {config.POST_PATH}?sessionId=...")

    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
