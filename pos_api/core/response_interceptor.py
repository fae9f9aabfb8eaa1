"""
Success Response Interceptor Middleware.
Wraps successful JSON responses in a standard envelope with a success flag
and, for list payloads, a count.
"""

from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.middleware.base import BaseHTTPMiddleware
import json


# Key for skipping the interceptor on specific routes
SKIP_INTERCEPTOR_KEY = "skip_interceptor"

EXCLUDED_PATHS = ("/openapi.json", "/docs", "/redoc")


class SuccessResponseInterceptor(BaseHTTPMiddleware):
    """
    Wraps 2xx JSON responses as:
    {
        "success": true,
        "count": <length> (if data is a list),
        "data": <original response>
    }

    Non-JSON bodies (CSV exports) and routes marked with @skip_interceptor
    pass through untouched.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if request.url.path in EXCLUDED_PATHS:
            return response

        if not (200 <= response.status_code < 300):
            return response

        if getattr(request.state, SKIP_INTERCEPTOR_KEY, False):
            return response

        if "application/json" not in response.headers.get("content-type", ""):
            return response

        response_body = b""
        async for chunk in response.body_iterator:
            response_body += chunk

        try:
            original_data = json.loads(response_body.decode())
        except (json.JSONDecodeError, UnicodeDecodeError):
            return Response(
                content=response_body,
                status_code=response.status_code,
                headers=dict(response.headers),
            )

        wrapped_response = {"success": True, "data": original_data}
        if isinstance(original_data, list):
            wrapped_response["count"] = len(original_data)

        # Content-Length is recalculated by JSONResponse
        headers = dict(response.headers)
        headers.pop("content-length", None)

        return JSONResponse(
            content=wrapped_response,
            status_code=response.status_code,
            headers=headers,
        )


def skip_interceptor(func: Callable) -> Callable:
    """
    Decorator to skip the success response interceptor on specific routes.

    Usage:
        @router.delete("/{id}")
        @skip_interceptor
        async def delete_endpoint():
            return {"message": "deleted"}
    """
    setattr(func, SKIP_INTERCEPTOR_KEY, True)
    return func


class CustomAPIRoute(APIRoute):
    """
    API route that copies the skip_interceptor flag of its endpoint into the
    request state, where the middleware can see it.
    """

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()
        skip = getattr(self.endpoint, SKIP_INTERCEPTOR_KEY, False)

        async def custom_route_handler(request: Request) -> Response:
            if skip:
                setattr(request.state, SKIP_INTERCEPTOR_KEY, True)
            return await original_route_handler(request)

        return custom_route_handler
