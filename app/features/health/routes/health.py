from datetime import datetime, timezone

from fastapi import APIRouter, status

from app.features.lighthouse.schemas.lighthouse import HealthOut
from app.platform.config import settings
from app.platform.response import api_response


router = APIRouter()

@router.get("/health", tags=["health"])
async def health_check():
    health = HealthOut(timestamp=datetime.now(timezone.utc), service=settings.APP_NAME)
    return api_response(data=health.model_dump(), status_code=status.HTTP_200_OK)
