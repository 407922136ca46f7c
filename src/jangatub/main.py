import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.jangatub.api.api_v1.api import api_router
from src.jangatub.api.auth_deps import session_from_request
from src.jangatub.core.access import GateOutcome, decide, gate_response, load_policies
from src.jangatub.core.config import settings
from src.jangatub.core.error_handlers import (
    app_error_handler,
    error_response,
    general_exception_handler,
    http_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)
from src.jangatub.core.errors import AppError
from src.jangatub.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI application."""
    logger.info(f"Environment: {settings.ENV}")
    load_policies()

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        if settings.ENV == "production":
            raise

    yield


def _masked_headers(request: Request) -> dict:
    headers = dict(request.headers)
    for name in ("authorization", "cookie"):
        if name in headers:
            value = headers[name]
            headers[name] = value[:16] + "..." if len(value) > 16 else value
    return headers


def create_app() -> FastAPI:
    """Create FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
    )

    @app.get("/healthz")
    async def health_check():
        """Health check endpoint for container orchestration."""
        try:
            async with AsyncSessionLocal() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {e}")
            return error_response(503, "Service unhealthy")
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": settings.PROJECT_NAME,
        }

    # Registered first so it runs inside the logging middleware.
    @app.middleware("http")
    async def access_gate_middleware(request: Request, call_next):
        path = request.url.path
        session = session_from_request(request)
        decision = decide(path, session)
        if decision.outcome != GateOutcome.ALLOW:
            logger.info(f"Gate {decision.outcome.value} {path} ({decision.reason or 'unauthenticated'})")
            return gate_response(path, session, decision)
        return await call_next(request)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        start_time = time.time()
        logger.info(f"{request.method} {request.url.path} query={dict(request.query_params)}")
        logger.debug(f"Headers: {_masked_headers(request)}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {process_time:.4f}s")
        return response

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    if settings.ENV == "development":
        logger.info("Development mode: Allowing all CORS origins")
        cors_origins = ["*"]
    else:
        cors_origins = settings.BACKEND_CORS_ORIGINS.copy()
    logger.info("CORS Origins: %s", cors_origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="localhost", port=settings.SERVER_PORT)
