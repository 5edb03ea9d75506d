from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

import time
import logging
from typing import Callable

from .config import settings

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware for adding security headers to all responses"""

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)

        img_sources = "'self' data: https:"
        if settings.DO_SPACES_CDN_ENDPOINT:
            img_sources += f" {settings.DO_SPACES_CDN_ENDPOINT}"

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "script-src 'self'; "
            f"img-src {img_sources}; "
            "frame-ancestors 'none';"
        )

        if "Server" in response.headers:
            del response.headers["Server"]

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and responses"""

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.time()
        logger.info(f"Request: {request.method} {request.url}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"{response.status_code} - {process_time:.4f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response


class PayloadSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared body exceeds MAX_PAYLOAD_MB"""

    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: Callable):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > self.max_bytes:
                logger.warning(
                    f"Rejected {request.method} {request.url.path}: "
                    f"{content_length} bytes exceeds {self.max_bytes}"
                )
                return JSONResponse(
                    status_code=413,
                    content={"success": False, "error": "Payload too large"},
                )
        return await call_next(request)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for handling errors gracefully"""

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unexpected error: {str(e)}", exc_info=True)

            message = "Internal Server Error" if settings.is_production else str(e)
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": message},
            )
