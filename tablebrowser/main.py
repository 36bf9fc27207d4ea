"""Table Browser — FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from tablebrowser.api.tables import router as tables_router
from tablebrowser.browse.service import TableBrowser
from tablebrowser.config import AppConfig
from tablebrowser.db.connection import Database
from tablebrowser.errors import TableBrowserError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    logger.info("Table browser started (database backend: %s)", app.state.db.backend)

    yield

    app.state.db.dispose()
    logger.info("Application shutdown complete")


def _init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry SDK if a DSN is configured and not in development."""
    if not dsn or environment == "development":
        return
    sentry_sdk.init(
        dsn,
        environment=environment,
        traces_sample_rate=0,
        send_client_reports=False,
        auto_session_tracking=False,
    )


async def _browser_error_handler(request: Request, exc: TableBrowserError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s raised an unexpected error", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal error"})


def create_app(config: AppConfig | None = None, db: Database | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if config is None:
        config = AppConfig.from_yaml()

    _init_sentry(config.sentry_dsn, config.environment)

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, config.server.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Table Browser",
        version="1.0.0",
        description="Browse and edit database tables",
        lifespan=lifespan,
        debug=config.environment == "development",
    )

    if db is None:
        db = Database.from_config(config)
    app.state.config = config
    app.state.db = db
    app.state.browser = TableBrowser(db, key_columns=config.database.key_columns)

    app.add_exception_handler(TableBrowserError, _browser_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    # Register routes
    app.include_router(tables_router)

    # Static UI last, so it never shadows the API
    if config.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="static")
    else:
        logger.warning("Static directory %s not found, UI not served", config.static_dir)

    return app


def cli_entry() -> None:
    """CLI entry point for running the server."""
    import uvicorn

    config = AppConfig.from_yaml()
    app = create_app(config)

    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level,
    )
