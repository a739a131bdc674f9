"""Application factory for the mock OpenAI API."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from openai_mock.core.config import Settings, get_settings
from openai_mock.core.errors import (
    InternalServerError,
    MethodNotAllowedError,
    MockAPIError,
    NotFoundError,
    RequestTimeoutError,
)
from openai_mock.core.service import MockService

from .api import build_router, router as public_router

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def _error_response(error: MockAPIError) -> JSONResponse:
    return JSONResponse(error.to_dict(), status_code=error.status_code)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app around a :class:`MockService` for ``settings``."""

    settings = settings or get_settings()
    service = MockService(settings.to_mock_config())

    app = FastAPI(
        title="OpenAI Mock API",
        version=VERSION,
        description="Deterministic stand-in for the OpenAI completions, chat and embeddings API.",
    )
    app.state.settings = settings
    app.state.service = service

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        method, path = request.method, request.url.path
        if exc.status_code == 404:
            return _error_response(NotFoundError(f"Invalid URL ({method} {path})"))
        if exc.status_code == 405:
            return _error_response(MethodNotAllowedError(f"Method {method} is not allowed for {path}."))
        error = MockAPIError(str(exc.detail))
        error.status_code = exc.status_code
        error.error_type = "invalid_request_error" if exc.status_code < 500 else "server_error"
        return _error_response(error)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error for %s %s", request.method, request.url.path)
        return _error_response(InternalServerError())

    @app.middleware("http")
    async def enforce_timeout(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=settings.REQUEST_TIMEOUT_SECS)
        except asyncio.TimeoutError:
            logger.warning(
                "%s %s exceeded %ss", request.method, request.url.path, settings.REQUEST_TIMEOUT_SECS
            )
            return _error_response(RequestTimeoutError())

    if settings.ENABLE_LOGGING:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms
            )
            return response

    if settings.ENABLE_CORS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "x-api-key"],
            max_age=86400,
        )

    app.include_router(public_router)
    app.include_router(build_router(service))
    return app
