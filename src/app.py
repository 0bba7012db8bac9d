"""Main FastAPI application module.

This module builds the FastAPI application, wires the startup-built services
onto ``app.state``, registers the route handlers and the error handlers that
render every failure in the standard envelope.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import auth, bimbel, feature, matpel
from config import API_HOST, API_PORT, CORS_ALLOWED_ORIGINS, Settings, load_settings
from core.database import init_db
from core.exceptions import BimbelServiceError
from core.logging_config import setup_logging
from core.security import TokenService
from schemas.response import error_response
from utils.thumbnail_storage import ThumbnailStorage

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request payload"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"invalid request payload: {field} {first.get('msg', '')}".strip()


def register_exception_handlers(app: FastAPI) -> None:
    """Render application, HTTP and validation errors as the error envelope."""

    @app.exception_handler(BimbelServiceError)
    async def handle_service_error(request: Request, exc: BimbelServiceError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return error_response(400, _validation_message(exc))

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        # Storage details never reach the client
        logger.exception("Storage failure on %s %s", request.method, request.url.path)
        return error_response(500, "internal server error")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Immutable settings; loaded from the environment when omitted.

    Returns:
        Configured FastAPI instance.
    """
    settings = settings or load_settings()

    app = FastAPI(
        title="Bimbel Marketplace API",
        description="Backend API for tutors, participants and their bimbels.",
        version="1.0.0",
    )

    app.state.settings = settings
    app.state.token_service = TokenService(
        settings.jwt_secret, settings.jwt_exp_hours, settings.jwt_algorithm
    )
    app.state.thumbnail_storage = ThumbnailStorage(
        settings.upload_dir, settings.upload_url_prefix
    )

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register route handlers; only /register and /login skip the token gate
    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(feature.router, prefix=settings.api_prefix)
    app.include_router(matpel.router, prefix=settings.api_prefix)
    app.include_router(bimbel.router, prefix=settings.api_prefix)

    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=str(settings.upload_dir)),
        name="uploads",
    )

    @app.get("/", summary="API root", tags=["Info"])
    def root() -> dict:
        """API root path, returns API information and documentation links."""
        return {
            "name": "Bimbel Marketplace API",
            "version": "1.0.0",
            "docs": {"swagger": "/docs", "redoc": "/redoc"},
            "health": "/api/health",
        }

    @app.get("/api/health", summary="Health check", tags=["Health"])
    def health() -> dict:
        return {"status": "ok"}

    return app


setup_logging()

app = create_app()


@app.on_event("startup")
def startup_tasks() -> None:
    """Create missing tables on the configured database."""
    init_db()
    logger.info("Database ready")


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    print(f"Server running at {server_url}")
    print(f"API docs: {server_url}/docs")

    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
