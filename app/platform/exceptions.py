from fastapi import Request, status
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import CORS_HEADERS, error_response, not_found_response

logger = get_logger("exceptions")


class ServiceError(Exception):
    """Base class for errors raised by the dispatch service."""


class ValidationError(ServiceError):
    """The incoming audit request is missing or has a malformed field."""


class EngineError(ServiceError):
    """The audit engine could not produce a report."""


class DeliveryError(ServiceError):
    """The collector was unreachable or rejected the payload."""


class DispatcherClosed(ServiceError):
    """New jobs are refused once shutdown has begun."""


def add_exception_handlers(app):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and known paths with the wrong method look the same to callers
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return not_found_response()
        return error_response(str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        return error_response(str(exc), status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(DispatcherClosed)
    async def dispatcher_closed_handler(request: Request, exc: DispatcherClosed):
        return error_response(
            "Service is shutting down",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    # Runs in ServerErrorMiddleware, outside the CORS middleware, so it sets the headers itself
    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return error_response(
            "Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            headers=CORS_HEADERS,
        )
