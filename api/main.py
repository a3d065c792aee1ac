"""
Creator Settlement API - Main Application.

FastAPI application exposing order ingestion, payment confirmation, fraud
screening, payout generation and tournament leaderboards.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.settings import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title="Creator Settlement API",
    description="Order settlement and trust pipeline for a creator marketplace",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Wildcard origins cannot be combined with credentials
allow_all = "*" in settings.cors_allow_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allow_origins),
    allow_credentials=not allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "creator-settlement-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Creator Settlement API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import affiliate_links, arena, fraud, orders, payouts, webhooks

app.include_router(orders.router, prefix="/api/v1", tags=["Orders"])
app.include_router(webhooks.router, prefix="/api/v1", tags=["Payments"])
app.include_router(fraud.router, prefix="/api/v1", tags=["Fraud"])
app.include_router(payouts.router, prefix="/api/v1", tags=["Payouts"])
app.include_router(arena.router, prefix="/api/v1", tags=["Arena"])
app.include_router(affiliate_links.router, prefix="/api/v1", tags=["Affiliate Links"])
