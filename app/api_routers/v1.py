from fastapi import APIRouter

from app.features.health.routes.health import router as health_router
from app.features.lighthouse.routes.analyze import router as analyze_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(analyze_router)
api_router.include_router(health_router)
