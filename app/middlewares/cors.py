# app/middlewares/cors.py
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.platform.response import CORS_HEADERS


class PermissiveCORSMiddleware(BaseHTTPMiddleware):
    """
    Adds the same permissive CORS headers to every response, whether or not
    the request carries an Origin, and answers any OPTIONS with an empty 200.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
