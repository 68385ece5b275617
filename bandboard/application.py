"""Application factory for the Bandboard web interface."""
from __future__ import annotations

import logging
from http import HTTPStatus
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import LoginFlow, RegistrationFlow
from .catalog import build_catalog_router
from .config import Settings, load_settings
from .database import Database, DatabaseError
from .gate import RouteGate
from .passwords import HashingError, PasswordHasher
from .sessions import SessionStore
from .web import build_auth_router

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

NOT_FOUND_BODY = "<h1>404 Page Not Found!</h1>"
SERVER_ERROR_BODY = "Server Error"

logger = logging.getLogger("bandboard.application")


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    hasher: Optional[PasswordHasher] = None,
    initialize_database: bool = True,
) -> FastAPI:
    """Create the Bandboard ASGI application."""

    if settings is None:
        settings = load_settings()
    if not settings.session_secret:
        raise RuntimeError("BANDBOARD_SESSION_SECRET must be configured to serve the web interface")

    if database is None:
        database = Database(settings.database_path)
    if initialize_database:
        database.initialize()
    if hasher is None:
        hasher = PasswordHasher(settings.bcrypt_rounds)

    app = FastAPI(
        title="Bandboard",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.database = database

    sessions = SessionStore(ttl_seconds=settings.session_max_age, cookie_name=settings.session_cookie)
    sessions.install(app, secret_key=settings.session_secret, https_only=settings.session_https_only)

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
    gate = RouteGate(sessions, templates)

    app.include_router(build_catalog_router(database=database, templates=templates))
    app.include_router(
        build_auth_router(
            database=database,
            templates=templates,
            sessions=sessions,
            gate=gate,
            registration=RegistrationFlow(database, hasher, settings.registration),
            login=LoginFlow(database, hasher),
        )
    )

    if settings.static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")
    if settings.picture_dir.is_dir():
        app.mount("/pic", StaticFiles(directory=str(settings.picture_dir)), name="pic")
    else:
        logger.debug("Picture directory %s does not exist; /pic is not served", settings.picture_dir)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        # A known path hit with the wrong method is reported as a missing page.
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED or (
            exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == HTTPStatus.NOT_FOUND.phrase
        ):
            return HTMLResponse(NOT_FOUND_BODY, status_code=status.HTTP_404_NOT_FOUND)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(DatabaseError)
    async def _database_error(request: Request, exc: DatabaseError):
        logger.error("Database failure while serving %s %s", request.method, request.url.path, exc_info=exc)
        return PlainTextResponse(SERVER_ERROR_BODY, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(HashingError)
    async def _hashing_error(request: Request, exc: HashingError):
        logger.error("Password hashing failed while serving %s", request.url.path, exc_info=exc)
        return PlainTextResponse(SERVER_ERROR_BODY, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return app


__all__ = ["NOT_FOUND_BODY", "SERVER_ERROR_BODY", "TEMPLATE_DIR", "create_app"]
