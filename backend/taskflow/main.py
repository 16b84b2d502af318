from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded

from taskflow import __version__
from taskflow.core.config import settings
from taskflow.core.database import init_db, close_db
from taskflow.core.exceptions import TaskflowError, error_response
from taskflow.core.logging_config import logger
from taskflow.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from taskflow.core.rate_limiter import limiter, rate_limit_exceeded_handler
from taskflow.api.v1.router import api_router
from taskflow.services.connection_registry import ConnectionRegistry
from taskflow.services.notification_dispatcher import NotificationDispatcher
from taskflow.services.websocket_hub import WebSocketHub


PLACEHOLDER_SECRETS = {"", "CHANGE_ME", "changeme", "secret"}


def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if settings.JWT_SECRET_KEY in PLACEHOLDER_SECRETS:
        errors.append("JWT_SECRET_KEY is not set or using default value")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    if settings.is_production and len(settings.JWT_SECRET_KEY) < 32:
        logger.warning("[Startup] WARNING: JWT_SECRET_KEY is shorter than 32 characters")

    logger.info("[Startup] Critical configuration validated")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT}, API {settings.API_VERSION})")

    validate_critical_config()
    await init_db()
    logger.info("[Startup] Database tables ready")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


async def taskflow_error_handler(request: Request, exc: TaskflowError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    first = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"detail": first, "code": "VALIDATION_ERROR", "details": {"errors": errors}}
    )


async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "code": "INTERNAL_ERROR",
            "details": {"message": str(exc)} if settings.DEBUG else {}
        }
    )


def create_app() -> FastAPI:
    """
    Build the application together with its push-notification plumbing.

    The registry, hub and dispatcher live on app.state so every app instance
    (and every test) gets its own.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Collaborative task management with real-time notifications",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        redirect_slashes=False
    )

    registry = ConnectionRegistry()
    hub = WebSocketHub()
    app.state.registry = registry
    app.state.hub = hub
    app.state.dispatcher = NotificationDispatcher(registry, hub)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(TaskflowError, taskflow_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # Order matters - last added runs first
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")
    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run(
        "taskflow.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
