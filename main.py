#!/usr/bin/env python3

"""
Main application entry point for the task manager API.

Architecture: FastAPI application over an async SQLAlchemy database.
Key Features: Lifecycle management, database health checks, error handling, CORS configuration.
"""

import asyncio
import sys

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import errno
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskmanager.api.task_history import router as task_history_router
from taskmanager.api.users import router as users_router
from taskmanager.config import Settings, settings as default_settings
from taskmanager.db import check_db_connection, close_db, init_db
from taskmanager.exceptions import AppError
from taskmanager.utils.auth import PasswordHasher, TokenService
from taskmanager.utils.logger import setup_logger

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

        # Build it now so the first failed login does not pay for it
        await app.state.password_hasher.dummy_hash_async()

    except Exception as e:
        logger.critical(f"Startup error: {e}")
        raise SystemExit(f"Startup failed: {e}") from e

    logger.info("Task Manager API startup successful.")
    yield

    logger.info("Task Manager API shutdown...")
    await close_db()
    logger.info("Shutdown complete.")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title="Task Manager API", lifespan=lifespan)

    # Built once from the frozen settings; read-only afterwards
    app.state.password_hasher = PasswordHasher.from_settings(settings)
    app.state.token_service = TokenService.from_settings(settings)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code.value} on {request.method} {request.url.path}")
        else:
            logger.info(
                f"{exc.code.value} on {request.method} {request.url.path}: {exc.message}"
            )
        headers = (
            {"WWW-Authenticate": "Bearer"}
            if exc.status_code == status.HTTP_401_UNAUTHORIZED
            else None
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "code": exc.code.value, "detail": exc.message},
            headers=headers,
        )

    @app.exception_handler(OSError)
    async def oserror_exception_handler(request: Request, exc: OSError):
        logger.error(f"OSError caught: {exc}, errno: {exc.errno}")
        if exc.errno in [errno.ETIMEDOUT, errno.ECONNREFUSED]:
            logger.error(
                f"Returning 503 due to DB connection issue: {settings.db_unavailable_hint}"
            )
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"detail": settings.db_unavailable_hint},
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An unexpected OS error occurred."},
        )

    @app.get("/health", tags=["Health"])
    async def health():
        database_ok = await check_db_connection()
        return JSONResponse(
            status_code=status.HTTP_200_OK
            if database_ok
            else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "ok" if database_ok else "degraded", "database": database_ok},
        )

    app.include_router(users_router)
    app.include_router(task_history_router)
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
    port = int(default_settings.server_port)
    host = default_settings.server_host

    logger.info(f"Starting Task Manager API server on {host}:{port}")

    try:
        uvicorn.run(
            "main:app", host=host, port=port, workers=default_settings.server_workers
        )
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
