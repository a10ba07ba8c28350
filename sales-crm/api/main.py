"""
Sales CRM Metrics API - Main Application.

FastAPI application serving the dashboard, loyalty alerts, reports and
password policy to the CRM frontend.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.config import cors_origins, log_level

# Service modules log through the root logger
logging.basicConfig(
    level=log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title="Sales CRM Metrics API",
    description="Dashboard metrics, loyalty alerts, sales reports and password policy for the sales CRM",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - origins come from CRM_CORS_ORIGINS ("*" when unset)
origins = cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    # Browsers reject credentials with a wildcard origin
    allow_credentials=origins != ["*"],
    allow_methods=["GET", "POST"],
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
        "service": "sales-crm-metrics-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint listing the API sections.
    """
    return {
        "message": "Sales CRM Metrics API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "dashboard": "/api/v1/dashboard",
            "loyalty_alerts": "/api/v1/alerts/loyalty",
            "reports": "/api/v1/reports",
            "passwords": "/api/v1/passwords",
        },
    }


# Import and include routers
from api.routers import dashboard, reports, passwords

app.include_router(dashboard.router, prefix="/api/v1", tags=["Dashboard"])
app.include_router(reports.router, prefix="/api/v1", tags=["Reports"])
app.include_router(passwords.router, prefix="/api/v1", tags=["Passwords"])
