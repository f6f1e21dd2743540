"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, imgproc.api, imgproc.observability, imgproc.configs
System role: Application initialization and configuration
"""

from contextlib import asynccontextmanager
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from imgproc.api import api_router
from imgproc.api.deps import get_service_cache
from imgproc.api.error_handlers import register_exception_handlers
from imgproc.boundary.db.connection import dispose_engine
from imgproc.boundary.db.create_tables import create_all_tables
from imgproc.configs import get_settings
from imgproc.observability.logger import configure_logging
from imgproc.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging, optionally creates tables (local/dev), and releases
    the HTTP client and database pool on shutdown.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "Application startup",
        extra={
            "environment": settings.environment,
            "processing_mode": settings.processing.mode,
        },
    )

    if settings.database.create_tables:
        await create_all_tables()

    yield

    logger.info("Application shutdown")
    await get_service_cache().aclose()
    await dispose_engine()


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Image Processing API",
        description="Authenticated image transformation jobs with presigned S3 transfers",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
    )

    # Added first = innermost; correlation id wraps request logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Cache", "X-Correlation-ID"],
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "imgproc.main:app",
        host="0.0.0.0",
        port=8080,
        reload=get_settings().debug,
    )
