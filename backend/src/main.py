"""Survey Reply Ingestion - Main FastAPI Application

Receives survey replies from the inbound mail provider and turns them into
stored survey responses.

This module creates and configures the FastAPI application, including:
- The inbound email webhook router
- Middleware (request ID correlation, CORS)
- Health and metrics endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from observability.logging_config import configure_logging
from observability.middleware import RequestIDMiddleware
from observability.router import router as observability_router
from replies.router import router as inbound_email_router

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Survey reply API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    if not settings.INBOUND_EMAIL_SECRET:
        logger.warning("INBOUND_EMAIL_SECRET is not set; webhook accepts unauthenticated calls")

    yield

    logger.info("Survey reply API shutting down...")


is_production = settings.ENVIRONMENT == "production"

app = FastAPI(
    title="Survey Reply Ingestion API",
    description="Ingests quality-survey ratings sent back by email",
    version="0.1.0",
    docs_url=None if is_production else "/docs",
    redoc_url=None if is_production else "/redoc",
    openapi_url=None if is_production else "/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

# Request ID Middleware (must be first for proper correlation)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# ROUTERS
# =============================================================================

app.include_router(observability_router)
app.include_router(inbound_email_router)
