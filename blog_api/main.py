import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .db import close_client, init_db
from .errors import BlogAPIError
from .middleware import (
    ErrorHandlingMiddleware,
    LoggingMiddleware,
    PayloadSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from .routers import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Initializing database connection...")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Routers retry through ensure_db on first request
        logger.warning(f"Database initialization warning: {str(e)}")

    yield

    await close_client()
    logger.info("Database client closed")


app = FastAPI(
    title="Blog CMS API",
    description="Backend API for the blog CMS",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Last added runs first: error handling wraps everything else
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    PayloadSizeLimitMiddleware, max_bytes=settings.MAX_PAYLOAD_MB * 1024 * 1024
)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ErrorHandlingMiddleware)


@app.exception_handler(BlogAPIError)
async def blog_api_error_handler(request: Request, exc: BlogAPIError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Validation failed",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = f"Not Found - {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": message},
    )


app.include_router(api_router)


@app.get("/api/health")
async def health_check():
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
    }


@app.get("/robots.txt", response_class=PlainTextResponse)
async def robots_txt():
    return (
        "User-agent: *\n"
        "Allow: /\n"
        "Disallow: /api/\n"
        "Disallow: /admin/\n"
        "\n"
        f"Sitemap: {settings.FRONTEND_URL.rstrip('/')}/sitemap.xml\n"
    )


@app.get("/ads.txt", response_class=PlainTextResponse)
async def ads_txt():
    if not settings.ADSENSE_PUBLISHER_ID:
        return PlainTextResponse("AdSense not configured", status_code=404)
    return f"google.com, {settings.ADSENSE_PUBLISHER_ID}, DIRECT, f08c47fec0942fa0\n"
