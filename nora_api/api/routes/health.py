from datetime import datetime, timezone

from fastapi import APIRouter

from nora_api.config import settings

router = APIRouter()


@router.get("/health", summary="Health check")
async def health_check():
    """
    Basic health check endpoint.
    """
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
