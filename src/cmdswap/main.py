"""FastAPI application factory for cmdswap."""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from cmdswap.config import settings
from cmdswap.engine.translators import init_default_translators
from cmdswap.exceptions import ConfigurationError
from cmdswap.logging_config import configure_logging

logger = logging.getLogger("cmdswap")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "request_id=%s method=%s path=%s status=%d duration_ms=%.2f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-ID"] = request_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    # Startup
    configure_logging()
    init_default_translators()
    from cmdswap.dependencies import get_coordinator

    try:
        get_coordinator()
    except ConfigurationError:
        # Served as 503 by the translate endpoints until the rules file is fixed
        logger.exception("Rules file is invalid")
    logger.info("cmdswap started")
    yield
    # Shutdown
    logger.info("cmdswap shutting down")


def create_app() -> FastAPI:
    app = FastAPI(
        title="cmdswap",
        description=(
            "Rewrites shell commands to faster equivalents "
            "when the rewrite is semantically safe."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # Include routers
    from cmdswap.api.health import router as health_router
    from cmdswap.api.v1.translate import router as translate_router

    app.include_router(health_router)
    app.include_router(translate_router)

    return app


app = create_app()
