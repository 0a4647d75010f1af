"""
FastAPI application factory and main app configuration.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
import logging

from .adapters.db.mongo.store import get_document_store
from .api.errors import APIError
from .api.routers import auth, health, resources
from .api.utils.responses import fail, to_json
from .core.config import get_settings
from .core.structured_logger import configure_logging
from .domain.errors import DomainError
from .middleware.performance_middleware import PerformanceMiddleware
from .middleware.request_id_middleware import RequestIDMiddleware
from .middleware.session_middleware import SessionIdentityMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.app_env}")

    # The service refuses to serve traffic without a store
    store = get_document_store()
    try:
        await store.connect(
            settings.database.uri,
            settings.database.db_name,
            server_selection_timeout_ms=settings.database.server_selection_timeout_ms,
        )
    except Exception as e:
        logger.critical(f"CRITICAL: Application startup failed: {e}", exc_info=True)
        raise
    logger.info("Application startup completed successfully")

    yield

    logger.info(f"Shutting down {settings.app_name}")
    store.disconnect()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    configure_logging(settings.logging)

    app = FastAPI(
        title=settings.app_name,
        description="Hospital API with patients, doctors, departments and appointments collections (CRUD)",
        version=settings.app_version,
        docs_url="/api-docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Innermost first: the identity middleware needs the session already decoded
    app.add_middleware(SessionIdentityMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.security.secret_key,
        session_cookie=settings.security.session_cookie,
        max_age=settings.security.session_max_age,
        same_site="lax",
        https_only=settings.security.https_only,
    )
    app.add_middleware(PerformanceMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=settings.cors.allowed_headers,
        max_age=600,
    )

    app.include_router(health.router)
    app.include_router(auth.router)
    for router in resources.routers:
        app.include_router(router)

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint."""
        return {"message": "Hospital API is running"}

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        req_id = getattr(request.state, "request_id", None)
        if exc.http_status >= 500:
            logger.error(f"DomainError: {exc.error_code} {exc.message} | request_id={req_id}")
        else:
            logger.info(f"DomainError: {exc.error_code} {exc.message} | request_id={req_id}")
        return JSONResponse(
            status_code=exc.http_status,
            content=to_json(fail(request, exc.error_code or "DOMAIN_ERROR", exc.message, exc.details)),
        )

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        req_id = getattr(request.state, "request_id", None)
        logger.warning(f"APIError: {exc.code} ({exc.http_status}) {exc.message} | request_id={req_id}")
        headers = {"WWW-Authenticate": "Session"} if exc.http_status == 401 else None
        return JSONResponse(
            status_code=exc.http_status,
            content=to_json(fail(request, exc.code, exc.message, exc.details)),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        req_id = getattr(request.state, "request_id", None)
        error_details = exc.errors()
        logger.info(f"ValidationError on {request.method} {request.url.path}: {error_details} | request_id={req_id}")

        error_messages = []
        for error in error_details:
            loc = " -> ".join(str(x) for x in error.get("loc", []))
            msg = error.get("msg", "Validation error")
            error_messages.append(f"{loc}: {msg}")

        return JSONResponse(
            status_code=400,
            content=to_json(fail(
                request,
                "INVALID_INPUT",
                f"Input validation failed: {'; '.join(error_messages)}",
                {"errors": error_details, "path": request.url.path},
            )),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        req_id = getattr(request.state, "request_id", None)
        logger.error(f"Unhandled error: {type(exc).__name__}: {exc} | request_id={req_id}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=to_json(fail(request, "INTERNAL_ERROR", "Internal Server Error")),
        )

    return app


# Create the app instance
app = create_app()
