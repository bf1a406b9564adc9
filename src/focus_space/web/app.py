"""FastAPI application for the focus-space API."""

import logging
import re
import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .. import __version__
from ..core.config import Settings, get_settings
from ..core.errors import FocusSpaceError
from ..core.logging import configure_logging
from ..db.engine import get_db_path, init_db
from ..services.instagram import InstagramTokenManager
from ..services.mailer import Mailer
from .routers import (
    admin_analytics,
    admin_bookings,
    admin_courses,
    admin_testimonials,
    auth,
    bookings,
    courses,
    ig_token,
    testimonials,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - runs on startup and shutdown."""
    db_path = app.state.db_path
    if not db_path.exists():
        await init_db(db_path)
    logger.info("focus-space API ready (db=%s)", db_path)
    yield


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _field_name(loc: tuple) -> str:
    """Snake-case field path of a validation error, without the "body" prefix."""
    parts = [_CAMEL_BOUNDARY.sub("_", str(part)).lower() for part in loc[1:]]
    return ".".join(parts) or "body"


def _error_response(status_code: int, message: str, errors: dict | None = None) -> JSONResponse:
    content: dict = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


def install_error_handlers(app: FastAPI) -> None:
    """Render every failure as {"success": false, "message", "errors"}."""

    @app.exception_handler(FocusSpaceError)
    async def domain_error(request: Request, exc: FocusSpaceError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.message, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = {}
        for error in exc.errors():
            errors.setdefault(_field_name(error["loc"]), error["msg"])
        return _error_response(400, "資料驗證失敗", errors)

    @app.exception_handler(sqlite3.IntegrityError)
    async def integrity_error(request: Request, exc: sqlite3.IntegrityError):
        logger.warning("Integrity error on %s: %s", request.url.path, exc)
        return _error_response(409, "資料已存在，無法重複新增")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(
            "%s on %s (500): %s", type(exc).__name__, request.url.path, exc, exc_info=exc
        )
        message = "伺服器內部錯誤，請稍後再試"
        if app.state.settings.is_debug:
            message = f"{message}: {exc}"
        return _error_response(500, message)


def create_app(
    db_path: Path | None = None,
    settings: Settings | None = None,
    mailer: Mailer | None = None,
    token_manager: InstagramTokenManager | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="focus-space",
        description="Focus Space studio bookings, courses and testimonials API",
        version=__version__,
        lifespan=lifespan,
    )

    # Shared services live on app state for the dependency getters
    app.state.settings = settings
    app.state.db_path = db_path or get_db_path(Path(settings.database_path))
    app.state.mailer = mailer or Mailer(settings)
    app.state.token_manager = token_manager or InstagramTokenManager(settings)
    app.state.clock = clock

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie="focus_space_session",
        same_site="lax",
        https_only=not settings.is_debug,
    )
    install_error_handlers(app)

    # Public
    app.include_router(bookings.router)
    app.include_router(courses.router)
    app.include_router(testimonials.router)
    app.include_router(ig_token.router)

    # Back office
    app.include_router(auth.router)
    app.include_router(admin_bookings.router)
    app.include_router(admin_courses.router)
    app.include_router(admin_testimonials.router)
    app.include_router(admin_analytics.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
