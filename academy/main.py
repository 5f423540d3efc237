"""
Academy Backend - FastAPI Application

Main entry point for the application.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from academy.api.v1 import router as api_v1_router
from academy.core.config import settings
from academy.core.database import close_db
from academy.core.http_client import close_http_client
from academy.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    configure_logging()
    logger.info(
        "Starting Academy Backend (environment=%s, backend=%s)",
        settings.ENVIRONMENT, settings.BACKEND_MODE,
    )
    yield
    # Shutdown
    logger.info("Shutting down Academy Backend")
    await close_http_client()
    await close_db()


# Create FastAPI application
app = FastAPI(
    title="Academy Backend",
    description="Learning platform backend for lesson progress, course completion, certificates and quiz grades.",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Health check endpoint.

    Returns:
        dict: Health status and environment info.
    """
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "backend": settings.BACKEND_MODE,
        "version": "0.1.0",
    }


@app.get("/", tags=["Root"])
async def root() -> dict:
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links.
    """
    return {
        "message": "Welcome to Academy Backend API",
        "docs": "/docs",
        "health": "/health",
    }
