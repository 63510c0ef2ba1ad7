"""VidTube API application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.gzip import GZipMiddleware

from vidtube.api import api_router
from vidtube.config import get_settings
from vidtube.db import engine, init_db
from vidtube.errors import register_exception_handlers
from vidtube.services.storage import close_storage
from vidtube.utils.cache import cache
from vidtube.utils.logging import get_logger, setup_logging

settings = get_settings()
setup_logging()
logger = get_logger(__name__)

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
HSTS_HEADER = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = HSTS_HEADER
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the cache and (outside production) the schema; release clients on shutdown."""
    if not settings.is_production:
        await init_db()
        logger.info("Database schema ensured")

    if await cache.connect():
        logger.info("Channel stats cache connected")
    elif cache.enabled:
        logger.warning("Redis unreachable, channel stats will not be cached")

    if not settings.storage_enabled:
        logger.warning("Cloudinary credentials missing, uploads will fail")

    yield

    await cache.close()
    await close_storage()
    await engine.dispose()
    logger.info(f"{settings.app_name} stopped")


def create_app() -> FastAPI:
    application = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

    # Added last runs first: CORS wraps compression wraps the header stamping
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(GZipMiddleware, minimum_size=500)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(application)
    application.include_router(api_router)
    return application


app = create_app()
