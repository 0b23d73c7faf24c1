"""
FastAPI Application Entry Point

This module builds the FastAPI application and configures:
- Storage (engine, counter store, record store) on startup
- The shortening service, kept on app.state and injected into endpoints
- Middleware (logging, CORS)

Run with `uvicorn shorturl.main:app` or the `shorturl` console script.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.ext.asyncio import async_sessionmaker

from shorturl.api import endpoints
from shorturl.core.logging_config import setup_logging
from shorturl.core.setting import CounterBackend, Settings, settings as default_settings
from shorturl.db import build_engine, build_session_maker, create_tables
from shorturl.db.interface import DatabaseAdapter
from shorturl.middleware.logging import add_logging_middleware
from shorturl.services.counter_store import CounterStore, DatabaseCounterStore, FileCounterStore
from shorturl.services.reachability import HttpReachabilityChecker, ReachabilityChecker
from shorturl.services.record_store import URLRecordStore
from shorturl.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)


def build_counter_store(
    settings: Settings,
    session_maker: async_sessionmaker,
    db_adapter: DatabaseAdapter
) -> CounterStore:
    """Create the counter store selected by COUNTER_BACKEND."""
    if settings.COUNTER_BACKEND is CounterBackend.file:
        logger.info(f"Using file counter at {settings.COUNTER_FILE}")
        return FileCounterStore(settings.COUNTER_FILE)

    logger.info(f"Using database counter '{settings.COUNTER_NAME}'")
    return DatabaseCounterStore(session_maker, db_adapter, name=settings.COUNTER_NAME)


def create_app(
    settings: Optional[Settings] = None,
    checker: Optional[ReachabilityChecker] = None
) -> FastAPI:
    """
    Build a FastAPI application.

    Args:
        settings: Configuration (defaults to the environment-loaded settings)
        checker: Reachability checker (defaults to the httpx checker)

    Returns:
        Configured FastAPI application; storage is opened on startup and
        closed on shutdown
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine, db_adapter = build_engine(settings.DATABASE_URL)
        if settings.CREATE_TABLES_ON_STARTUP:
            await create_tables(engine)

        session_maker = build_session_maker(engine)
        app.state.url_service = URLShorteningService(
            records=URLRecordStore(session_maker),
            counter=build_counter_store(settings, session_maker, db_adapter),
            checker=checker or HttpReachabilityChecker(timeout=settings.REACHABILITY_TIMEOUT),
        )
        logger.info("URL shortener started")
        try:
            yield
        finally:
            await engine.dispose()
            logger.info("URL shortener stopped")

    # Interactive docs are disabled: their paths would shadow short codes
    app = FastAPI(
        title="URL Shortener Service",
        description="Counter-based URL shortening service",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.docs = StaticFiles(directory=settings.DOCS_DIR, html=True, check_dir=False)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(endpoints.router, tags=["URL Shortener"])

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app on HOST:PORT."""
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
