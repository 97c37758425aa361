"""
Back-Office Analytics & Reporting Engine
Main FastAPI application
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
import os

from backoffice.config import get_settings
from backoffice.utils.logger import log
from backoffice import __version__

# Import routers
from backoffice.api import analytics, health

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    log.info(f"Starting {settings.app_name} v{__version__}")
    log.info(f"Environment: {settings.environment}")

    # Initialize database
    try:
        from backoffice.models.base import init_db
        init_db()
        log.info("Database initialized")
    except Exception as e:
        log.error(f"Database initialization error: {str(e)}")

    yield

    # Shutdown
    log.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="""
    Back-office analytics and reporting engine

    - Time-windowed metrics for sales, customers, inventory, marketing and finance
    - Combined dashboard snapshot computed across all domains concurrently
    - PDF, Excel and CSV report generation with an append-only report ledger
    - Income statement, balance sheet and cash flow reports
    """,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Gzip compression for the larger dashboard payloads
app.add_middleware(GZipMiddleware, minimum_size=500)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(analytics.router)

# Generated report files
os.makedirs(settings.reports_dir, exist_ok=True)
app.mount(settings.reports_url_prefix, StaticFiles(directory=settings.reports_dir), name="reports")


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "dashboard": "GET /analytics/dashboard",
            "domain_analytics": "GET /analytics/{domain}",
            "generate_report": "POST /analytics/{domain}/report",
            "list_reports": "GET /analytics/reports",
            "report_files": f"GET {settings.reports_url_prefix}/{{filename}}",
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backoffice.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=settings.api_workers if not settings.debug else 1
    )
