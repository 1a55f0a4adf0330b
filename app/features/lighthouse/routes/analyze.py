from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.features.lighthouse.services.gateway import AnalysisGateway
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger("analyze_routes")
router = APIRouter()


def get_gateway(request: Request) -> AnalysisGateway:
    return request.app.state.gateway


@router.post("/analyze", tags=["lighthouse"])
async def analyze(request: Request, gateway: AnalysisGateway = Depends(get_gateway)):
    try:
        payload = await request.json()
    except Exception as e:
        logger.error(f"Could not parse request body: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    accepted = gateway.accept(payload)
    return api_response(data=accepted.model_dump(), status_code=status.HTTP_200_OK)
