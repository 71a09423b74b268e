from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from api.handlers.exceptions import register_exception_handlers
from api.middleware.request_id import register_request_id_middleware
from api.middleware.security_headers import register_security_headers_middleware
from api.post_controller import posts_router
from api.routes.system import router as system_router
from core.config import settings
from core.logging import setup_logging
from db.database import check_db_connection, close_db_connections, create_tables

# Initialize global logging configuration early
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Starting up %s", settings.app_title)

    try:
        if settings.server.check_db_on_start:
            if await check_db_connection():
                logger.info("Database connection verified")
            else:
                raise RuntimeError("Database connection failed")
        else:
            logger.debug("Skipping DB connection check on startup (DB_CHECK_ON_START=false)")

        if settings.database and settings.database.create_tables:
            await create_tables()

        logger.info("Application startup completed")

    except Exception as e:  # pragma: no cover - startup failures should be visible in logs
        logger.error(f"Application startup failed: {e}")
        raise

    yield

    logger.info("Shutting down %s", settings.app_title)
    await close_db_connections()
    logger.info("Application shutdown completed")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.environment != "production" else None,
    )

    # Routers
    app.include_router(posts_router)
    app.include_router(system_router)
    app.mount("/static", StaticFiles(directory=str(settings.views.static_dir)), name="static")

    # Middlewares
    register_request_id_middleware(app)
    register_security_headers_middleware(app)

    # Exception handlers
    register_exception_handlers(app)

    return app
