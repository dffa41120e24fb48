"""
HTTP API Routes - service health check.
"""

from fastapi import APIRouter

from app.config import settings

router = APIRouter(prefix=settings.api_prefix)


@router.get("/")
async def read_root():
    """API health check endpoint."""
    return {"message": "TaskFlow API is running!"}
