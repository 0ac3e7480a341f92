"""
Health Check Router
Simple health check endpoint
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.db.storage import Storage, get_storage

router = APIRouter()


@router.get("/health")
async def health_check(store: Storage = Depends(get_storage)):
    """
    Health check endpoint.
    Returns API status and the size of the in-memory store.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "categories": len(store.get_categories()),
        "expenses": len(store.get_expenses()),
    }
