"""FastAPI application factory — entry point for the web app."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from saasboard.config import Settings, get_settings
from saasboard.db.session import Database
from saasboard.errors import AppError, InternalError, NotFound, ValidationError
from saasboard.routers import analytics, auth, health, pages, subscriptions, users
from saasboard.utils import setup_logging

logger = logging.getLogger(__name__)

APP_DIR = Path(__file__).parent
API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    settings: Settings = app.state.settings
    database: Database = app.state.db

    setup_logging(settings.log_level)
    await database.connect()

    # Auto-create tables for SQLite (dev mode); PostgreSQL uses Alembic
    if database.is_sqlite:
        await database.create_all()

    if settings.stripe_secret_key:
        from saasboard.services.subscription_service import init_stripe
        init_stripe()

    logger.info("%s started", settings.app_name)
    yield

    await database.disconnect()


def _is_api_request(request: Request) -> bool:
    return request.url.path.startswith(API_PREFIX)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationError.default_message
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database(settings.database_url, echo=settings.debug and settings.log_level == "DEBUG")

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
    )

    # --- Shared state ---
    templates = Jinja2Templates(directory=str(APP_DIR / "templates"))
    app.state.templates = templates
    app.state.settings = settings
    app.state.db = database

    # --- Static files ---
    app.mount("/static", StaticFiles(directory=str(APP_DIR / "static")), name="static")

    # --- Middleware ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Error handlers ---
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        error = ValidationError(_first_validation_message(exc))
        return JSONResponse(error.to_dict(), status_code=error.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and not _is_api_request(request):
            return templates.TemplateResponse(
                request,
                "error.html",
                {
                    "status_code": 404,
                    "title": "Page not found",
                    "message": "The page you're looking for doesn't exist or has been moved.",
                },
                status_code=404,
            )
        if exc.status_code == 404:
            return JSONResponse(NotFound().to_dict(), status_code=404)
        return JSONResponse(
            {"error": "HTTPError", "message": str(exc.detail)},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def server_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = InternalError()
        if not _is_api_request(request):
            return templates.TemplateResponse(
                request,
                "error.html",
                {
                    "status_code": 500,
                    "title": "Something went wrong",
                    "message": error.message,
                },
                status_code=500,
            )
        return JSONResponse(error.to_dict(), status_code=error.status_code)

    # --- Routers ---
    app.include_router(health.router)
    app.include_router(pages.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(subscriptions.router)
    app.include_router(analytics.router)

    return app
