"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from worksheet_studio.api.v1.router import api_router
from worksheet_studio.config import settings
from worksheet_studio.db.mongodb import close_mongodb, init_mongodb
from worksheet_studio.db.postgres import close_postgres, init_postgres
from worksheet_studio.db.redis import close_redis, init_redis

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open and close the account, worksheet and token stores."""
    logger.info("Starting up Worksheet Studio API...")
    await init_postgres()
    await init_mongodb()
    await init_redis()
    logger.info("All database connections established")

    yield

    logger.info("Shutting down Worksheet Studio API...")
    await close_postgres()
    await close_mongodb()
    await close_redis()
    logger.info("All database connections closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Worksheet Studio API",
        description="Author exam worksheets and export them as Word documents",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": VERSION}

    return app


app = create_app()
