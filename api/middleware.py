"""
Middleware for the SmartBagan API.

Provides:
- Request ID tracking, echoed in the X-Request-ID header and error bodies
- Structured JSON request logging with correlation IDs
- Basic security headers
- Sanitized 500 responses for unhandled exceptions
"""
import time
import uuid
import logging
import json
from typing import Callable, Optional
from contextvars import ContextVar
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from fastapi import FastAPI

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return request_id_ctx.get()


def error_response(status_code: int, error: str, detail) -> JSONResponse:
    """JSON error body shared by the 400/500 handlers and the 500 fallback.

    Every failure a client sees has the same ``error``/``detail``/``request_id``
    shape, so a fleet operator can quote one ID when reporting a bad plan.
    """
    request_id = get_request_id()
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail, "request_id": request_id},
        headers={"X-Request-ID": request_id} if request_id else {},
    )


class StructuredLogger:
    """
    One JSON object per log line for optimization and zone requests.

    Lines are tagged with the request ID so a scan, its fallback warnings
    and the final plan can be grepped together. Keyword fields left as
    None (no platform, no site) are omitted.
    """

    LEVELS = ("debug", "info", "warning", "error")

    def __init__(self, name: str, service: str = "smartbagan-api"):
        self.logger = logging.getLogger(name)
        self.service = service

    def log(self, level: str, message: str, **fields):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.upper(),
            "service": self.service,
            "request_id": get_request_id(),
            "message": message,
        }
        entry.update(fields)
        payload = {k: v for k, v in entry.items() if v is not None}
        getattr(self.logger, level)(json.dumps(payload, default=str))

    def __getattr__(self, level: str):
        if level not in self.LEVELS:
            raise AttributeError(level)
        return lambda message, **fields: self.log(level, message, **fields)


structured_logger = StructuredLogger("smartbagan")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds nosniff, frame and referrer headers to every response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Assigns each request an ID.

    Taken from the incoming X-Request-ID header when present, otherwise a
    fresh UUID4. Available through get_request_id() while the request runs.
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)

        try:
            response = await call_next(request)
            response.headers[self.HEADER_NAME] = request_id
            return response
        finally:
            request_id_ctx.reset(token)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration for each request."""

    EXCLUDED_PATHS = {"/api/health"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            structured_logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                client_ip=client_ip,
            )
            raise

        structured_logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            query=str(request.query_params) if request.query_params else None,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            client_ip=client_ip,
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Last-resort 500 for exceptions no route handler mapped.

    Domain errors (bad input, failed computation) have their own handlers
    in ``api.main``; anything reaching here is a bug, so the body only
    names the request ID unless ``debug`` is on.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            structured_logger.error(
                "Unhandled exception",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error=str(e),
            )
            detail = str(e) if self.debug else "Unexpected server error; quote the request ID when reporting it."
            return error_response(500, "Internal Server Error", detail)


def setup_middleware(app: FastAPI, debug: bool = False):
    """
    Configure middleware for the application.

    The last middleware added is the outermost. The request ID is set
    first and stays set until the error handler has built its body, and
    the access log sees the final status code, 500s included.
    """
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
