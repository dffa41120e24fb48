#!/usr/bin/env python3

"""
Main application entry point for the TaskFlow task-management service.

Architecture: FastAPI application with database, REST routers and a WebSocket
broadcast channel.
Key Features: Lifecycle management, database health checks, uniform
``{"error": ...}`` error bodies, CORS configuration.
"""

import asyncio
import sys

# Add this block to switch asyncio event loop policy on Windows
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import errno
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.analytics import router as analytics_router
from app.api.auth import router as auth_router
from app.api.categories import router as categories_router
from app.api.http import router as http_router
from app.api.tasks import router as tasks_router
from app.api.ws import router as ws_router
from app.config import settings
from app.db import check_db_connection, close_db, init_db
from app.errors import TaskFlowError
from app.services.broadcast import BroadcastChannel, ConnectionRegistry
from app.utils.logger import setup_logger

logger = setup_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup...")
    try:
        logger.info("Initializing database...")
        await init_db()
        logger.info("Database initialization complete.")

        logger.info("Checking database connectivity...")
        if await check_db_connection():
            logger.info("Database connectivity confirmed.")
        else:
            logger.critical("Database connectivity check failed.")
            raise SystemExit("Database connection failed.")

    except Exception as e:
        logger.critical(f"Startup error: {e}")
        raise SystemExit(f"Startup failed: {e}") from e

    logger.info("TaskFlow API startup successful.")

    yield

    logger.info("TaskFlow API shutdown...")
    await app.state.broadcast_channel.drain()
    await close_db()
    logger.info("Shutdown complete.")


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message}, headers=headers
    )


def _format_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def create_app(broadcast_scope: str | None = None):
    app = FastAPI(title="TaskFlow API", lifespan=lifespan)

    app.state.broadcast_channel = BroadcastChannel(
        ConnectionRegistry(), scope=broadcast_scope or settings.broadcast_scope
    )

    @app.exception_handler(TaskFlowError)
    async def taskflow_error_handler(request: Request, exc: TaskFlowError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        else:
            logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return _error_response(
            status.HTTP_400_BAD_REQUEST, _format_validation_error(exc)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(
            exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(OSError)
    async def oserror_exception_handler(request: Request, exc: OSError):
        logger.error(
            f"OSError caught: {exc}, errno: {exc.errno}, winerror: {getattr(exc, 'winerror', None)}"
        )
        is_timeout_or_refused = False
        if hasattr(exc, "winerror") and exc.winerror == 121:
            is_timeout_or_refused = True
        elif exc.errno in [errno.ETIMEDOUT, errno.ECONNREFUSED]:
            is_timeout_or_refused = True

        if is_timeout_or_refused:
            logger.error(
                f"Returning 503 due to DB connection issue: {settings.db_unavailable_hint}"
            )
            return _error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE, settings.db_unavailable_hint
            )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
        )

    app.include_router(ws_router)
    app.include_router(http_router)
    app.include_router(auth_router)
    app.include_router(tasks_router)
    app.include_router(categories_router)
    app.include_router(analytics_router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    return app


app = create_app()


def main():
    port = int(settings.server_port)
    host = settings.server_host

    logger.info(f"Starting TaskFlow API server on {host}:{port}")

    try:
        uvicorn.run(
            "main:app" if settings.server_workers > 1 else app,
            host=host,
            port=port,
            workers=settings.server_workers,
        )
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
