"""
Liveness and health check endpoints.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db, ping
from domain.constants import MSG_OK
from models import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def root():
    """Liveness — the process is up and serving requests."""
    return {"message": MSG_OK}


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check — verifies the delivery store answers."""
    try:
        await ping(db)
        return {
            "status": "healthy",
            "database_connected": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "database_connected": False,
                "error": str(e),
            },
        )
