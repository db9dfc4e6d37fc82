# expense_tracker/main.py
import uvicorn
import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from expense_tracker.core.config import Settings, get_settings
from expense_tracker.core.database import Database
from expense_tracker.core.db_utils import StorageTimeoutError
from expense_tracker.api.v1.api import api_router

# Register every table on Base.metadata
from expense_tracker.models import category, transaction, user  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


def _detail_to_message(detail) -> str:
    # fastapi-users reports some errors as {"code": ..., "reason": ...}
    if isinstance(detail, str):
        return detail
    if isinstance(detail, dict):
        return str(detail.get("reason") or detail.get("code") or detail)
    return str(detail)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    fields = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path") and not isinstance(part, int)]
    if not fields:
        return "Invalid request body"
    return f"Invalid value for {'.'.join(fields)}: {first.get('msg', 'invalid')}"


def register_exception_handlers(app: FastAPI) -> None:
    """Every error body is {"message": str}; internals never leak."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": _detail_to_message(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(SQLAlchemyError)
    @app.exception_handler(StorageTimeoutError)
    async def storage_exception_handler(request: Request, exc: Exception):
        logger.error(f"Storage error on {request.method} {request.url.path}: {exc!r}")
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    ``database`` lets callers (tests, scripts) supply a ready handle; otherwise
    one is built from settings at startup and disposed at shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "db", None) is None
        if owned:
            app.state.db = Database.from_settings(settings)
        # Create all tables on startup (Alembic owns schema changes after that)
        await app.state.db.create_all()
        logger.info(f"✅ {settings.APP_NAME} started ({settings.ENVIRONMENT})")
        try:
            yield
        finally:
            if owned:
                await app.state.db.dispose()
                app.state.db = None

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Authentication", "description": "Registration, login and logout"},
            {"name": "User Management", "description": "Profile of the signed-in user"},
            {"name": "categories", "description": "Income and expense categories"},
            {"name": "transactions", "description": "Filtered, sorted and paginated transactions"},
        ],
    )
    app.state.settings = settings
    app.state.db = database

    # CORS Configuration
    origins = [
        settings.FRONTEND_URL,
        "http://localhost:3000",  # Local development
        "http://localhost:5173",  # Vite dev server
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # ------------------------------------------------------------
    # ROOT ENDPOINT
    # ------------------------------------------------------------
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information"""
        return {
            "message": f"{settings.APP_NAME} is running!",
            "version": settings.VERSION,
        }

    # ------------------------------------------------------------
    # HEALTH CHECK ENDPOINT
    # ------------------------------------------------------------
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
        }

    # ------------------------------------------------------------
    # BUSINESS LOGIC ROUTES
    # ------------------------------------------------------------
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("expense_tracker.main:create_app", factory=True, host="0.0.0.0", port=port, reload=False)
