"""Chat API - Main Application Module.

This module initializes the FastAPI application with configuration, logging,
middleware, routing, and lifecycle management for the chat message store.
"""

import logging
import sys
import time
import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.logging_config import RequestLogger, setup_logging
from app.database import engine, init_models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifecycle events."""
    # Startup
    logger.info("Starting %s version=%s", settings.app_name, settings.version)

    # Production schemas are provisioned ahead of deployment
    if not settings.is_production:
        await init_models(engine)
        logger.info("Database tables created/verified")

    yield

    # Shutdown
    logger.info("Shutting down %s", settings.app_name)
    await engine.dispose()
    logger.info("Database connections closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Chat threads and messages with transactional storage",
        version=settings.version,
        lifespan=lifespan,
        docs_url=settings.docs_url if settings.is_development else None,
        redoc_url=settings.redoc_url if settings.is_development else None,
    )

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware."""
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    request_logger = RequestLogger()

    # Request ID and access log middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            request_logger.log(
                request.method,
                request.url.path,
                request.client.host if request.client else "",
                status_code,
                (time.perf_counter() - start) * 1000,
            )
        response.headers["X-Request-ID"] = request_id
        return response


def _error_content(request: Request, message: str, error_code: str, details) -> dict:
    return {
        "status": "error",
        "message": message,
        "error_code": error_code,
        "details": details,
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": getattr(request.state, "request_id", None),
    }


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        if exc.status_code >= 500:
            logger.error("Request failed: %s", message, exc_info=exc.__cause__)

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_content(request, message, error_code, details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Convert errors to JSON-serializable format
        errors = []
        for error in exc.errors():
            error_dict = {
                "loc": error.get("loc", []),
                "msg": str(error.get("msg", "Validation error")),
                "type": error.get("type", "value_error"),
            }
            if "input" in error:
                error_dict["input"] = str(error["input"])
            errors.append(error_dict)

        return JSONResponse(
            status_code=422,
            content=_error_content(request, "Validation error", "VALIDATION_ERROR", errors),
        )


def setup_routers(app: FastAPI):
    """Configure application routers."""
    from app.domains.chat.controller import router as chat_router

    @app.get("/health")
    async def health_check():
        """Health check endpoint that pings the database."""
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            db_status = "healthy"
        except Exception as e:
            logger.warning("Database health check failed: %s", e)
            db_status = "unhealthy"

        body = {
            "status": "healthy" if db_status == "healthy" else "unhealthy",
            "version": settings.version,
            "environment": settings.environment.value,
            "timestamp": datetime.now(UTC).isoformat(),
            "services": {"database": db_status},
        }
        return JSONResponse(status_code=200 if db_status == "healthy" else 503, content=body)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "description": "Chat threads and messages with transactional storage",
            "docs_url": settings.docs_url if settings.is_development else None,
        }

    app.include_router(chat_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload and settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
