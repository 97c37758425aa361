"""
Health check endpoint
"""
from fastapi import APIRouter
from datetime import datetime
from backoffice.models.base import check_connection
from backoffice import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness plus database connectivity"""
    database = check_connection()
    return {
        "status": "healthy" if database else "degraded",
        "database": "connected" if database else "unavailable",
        "timestamp": datetime.utcnow().isoformat(),
        "version": __version__
    }
