"""
Main FastAPI application for the Flowgraph API.

Configures the FastAPI app with middleware, REST and GraphQL routes,
and error handling.
"""

from contextlib import asynccontextmanager
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..auth.service import AuthService
from ..config.app_config import Settings, get_settings
from ..store.records import RecordStore, create_record_store
from ..utils.exceptions import BaseAPIException
from .graphql.schema import create_graphql_router
from .rest import nodes, system
from .rest.responses import ApiResponse, error_response

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    store: RecordStore = app.state.store
    if not store.initialized:
        store.load_all()

    logger.info(
        f"Serving REST on {settings.API_PREFIX} and GraphQL on {settings.GRAPHQL_PATH} "
        f"({store.total_record_count} records)"
    )
    yield
    logger.info(f"Shutting down {settings.APP_NAME}")


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None,
               auth_service: Optional[AuthService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings, defaults to the global settings
        store: Record store; created from DATA_PATH and loaded at startup if omitted
        auth_service: Token service; created from settings if omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        docs_url="/docs" if not settings.is_production else None,  # Disable docs in prod
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store if store is not None else create_record_store(settings.DATA_PATH)
    app.state.auth_service = auth_service or AuthService.from_settings(settings)

    # Add security middleware
    if settings.SECURITY_HEADERS_ENABLED:

        @app.middleware("http")
        async def add_security_headers(request: Request, call_next):
            """Add security headers to responses."""
            response = await call_next(request)

            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["X-API-Version"] = settings.APP_VERSION

            if settings.is_production:
                response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

            return response

    # Add trusted host middleware
    if settings.ALLOWED_HOSTS != ["*"]:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

    # Add CORS middleware
    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=settings.CORS_ORIGINS != ["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    # Add request timing and logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log each request and add processing time to response headers."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({process_time * 1000:.1f}ms)"
        )
        return response

    @app.exception_handler(BaseAPIException)
    async def api_exception_handler(request: Request, exc: BaseAPIException):
        """Handle custom API exceptions."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error_code}: {exc.message}")
        return error_response(request, exc.status_code, exc.error_code, exc.message, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions, including unmatched routes."""
        if exc.status_code == 404:
            return error_response(
                request, 404, "RESOURCE_NOT_FOUND", f"Route not found: {request.method} {request.url.path}"
            )
        return error_response(request, exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        return error_response(
            request, 400, "VALIDATION_ERROR", "Input validation failed",
            {"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")

        if settings.expose_error_details:
            # In development, show the actual error
            return error_response(request, 500, "INTERNAL_ERROR", str(exc), {"type": type(exc).__name__})

        return error_response(request, 500, "INTERNAL_ERROR", "Internal server error")

    @app.get("/", response_model=ApiResponse, response_model_exclude_unset=True, tags=["system"])
    async def root():
        """Server information and endpoint map."""
        info = {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "endpoints": {
                "graphql": settings.GRAPHQL_PATH,
                "rest": settings.API_PREFIX,
                "health": f"{settings.API_PREFIX}/health",
            },
            "documentation": {
                "graphql": f"Visit {settings.GRAPHQL_PATH} for the GraphiQL IDE",
                "rest": f"Visit {settings.API_PREFIX} for REST API information",
            },
        }
        return ApiResponse.ok(info, settings.APP_NAME)

    # Include routers
    app.include_router(system.router, prefix=settings.API_PREFIX, tags=["system"])

    app.include_router(nodes.router, prefix=settings.API_PREFIX, tags=["nodes"])

    app.include_router(create_graphql_router(settings), prefix=settings.GRAPHQL_PATH, tags=["graphql"])

    return app


# Create the app instance
app = create_app()
