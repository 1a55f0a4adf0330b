from typing import Any, Dict, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

AVAILABLE_ENDPOINTS = [
    "POST /analyze - Start a Lighthouse test",
    "GET /health - Health check",
]


def api_response(
    data: Optional[Any] = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Single source of truth for successful JSON responses.
    The payload is sent as-is, without an envelope.
    """
    content = jsonable_encoder(data) if data is not None else {}
    return JSONResponse(status_code=status_code, content=content)


def error_response(
    message: str,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    headers: Optional[Dict[str, str]] = None,
    **extra: Any,
) -> JSONResponse:
    """Error payloads always carry an ``error`` message, plus optional extras."""
    content = {"error": message}
    content.update(jsonable_encoder(extra))
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def not_found_response() -> JSONResponse:
    return error_response(
        "Endpoint not found",
        status_code=status.HTTP_404_NOT_FOUND,
        availableEndpoints=AVAILABLE_ENDPOINTS,
    )
