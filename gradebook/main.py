import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from gradebook.core.config.logging_config import setup_logging
from gradebook.core.config.settings import Settings, get_settings
from gradebook.core.errors import AppError, ErrorCode, code_for_status
from gradebook.db.init_db import init_db
from gradebook.db.session import SessionLocal, engine
from gradebook.routers import assignments, auth, files, stats, submissions

error_logger = logging.getLogger("gradebook.errors")


def error_response(status_code: int, detail, code: ErrorCode) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code.value},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    # Setup logging
    logger = setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        os.makedirs(settings.UPLOAD_DIR, exist_ok=True)

        # Initialize database
        init_db(engine)
        logger.info("Database initialized successfully")

        # Initialize Redis if URL is configured
        app.state.redis = None
        if settings.REDIS_URL:
            try:
                redis = Redis.from_url(
                    settings.REDIS_URL,
                    encoding="utf-8",
                    decode_responses=True
                )
                await redis.ping()
                app.state.redis = redis
                logger.info("Redis connection established")
            except Exception as e:
                logger.error(f"Failed to connect to Redis: {str(e)}")

        try:
            yield
        finally:
            if app.state.redis:
                await app.state.redis.aclose()
                logger.info("Redis connection closed")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        lifespan=lifespan,
    )
    app.state.redis = None

    # Rate limiting middleware, registered first so request logging wraps it
    @app.middleware("http")
    async def rate_limit(request: Request, call_next: Callable):
        redis = request.app.state.redis
        if redis and request.client:
            key = f"rate_limit:{request.client.host}"
            requests = await redis.incr(key)

            if requests == 1:
                await redis.expire(key, 60)  # Reset after 60 seconds

            if requests > settings.RATE_LIMIT_PER_MINUTE:
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content={"detail": "Too many requests", "code": ErrorCode.RATE_LIMITED.value}
                )

        return await call_next(request)

    # Middleware for request logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        logger.info(
            f"Method: {request.method} Path: {request.url.path} "
            f"Status: {response.status_code} Duration: {duration:.2f}s"
        )
        return response

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers with prefix
    api_prefix = settings.API_PREFIX
    app.include_router(auth.router, prefix=api_prefix)
    app.include_router(assignments.router, prefix=api_prefix)
    app.include_router(submissions.router, prefix=api_prefix)
    app.include_router(stats.router, prefix=api_prefix)
    app.include_router(files.router, prefix=api_prefix)

    # Exception handlers
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.warning(f"{exc.code.value} on {request.method} {request.url.path}: {exc.detail}")
        return error_response(exc.status_code, exc.detail, exc.code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation failed on {request.method} {request.url.path}")
        errors = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "Invalid request data",
                "code": ErrorCode.VALIDATION_ERROR.value,
                "errors": errors,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.error(f"HTTP Exception: {exc.detail}")
        return error_response(exc.status_code, exc.detail, code_for_status(exc.status_code))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        error_logger.error(f"Unhandled Exception: {str(exc)}", exc_info=True)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            ErrorCode.SERVER_ERROR,
        )

    # Health check endpoint with additional status info
    @app.get("/health")
    async def health_check(request: Request):
        redis = request.app.state.redis
        status_info = {
            "status": "healthy",
            "timestamp": time.time(),
            "database": "connected",
            "redis": "connected" if redis else "not configured"
        }

        # Check database connection
        try:
            with SessionLocal() as db:
                db.execute(text("SELECT 1"))
        except Exception as e:
            status_info["database"] = "disconnected"
            status_info["status"] = "unhealthy"
            logger.error(f"Database health check failed: {str(e)}")

        # Check Redis connection if configured
        if redis:
            try:
                await redis.ping()
            except Exception as e:
                status_info["redis"] = "disconnected"
                status_info["status"] = "unhealthy"
                logger.error(f"Redis health check failed: {str(e)}")

        return status_info

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
