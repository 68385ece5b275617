"""Registration, login and landing pages for the Bandboard web interface."""

from __future__ import annotations

import logging

import anyio
from fastapi import APIRouter, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from .auth import (
    AuthenticationError,
    LoginFlow,
    LoginForm,
    PASSWORD_MIN_LENGTH,
    RegistrationFlow,
    RegistrationForm,
    ValidationError,
)
from .database import Database
from .gate import LANDING_ROUTE, RouteGate
from .sessions import SessionStore

logger = logging.getLogger("bandboard.web")

GUEST_NAME = "Guest"


def build_auth_router(
    *,
    database: Database,
    templates: Jinja2Templates,
    sessions: SessionStore,
    gate: RouteGate,
    registration: RegistrationFlow,
    login: LoginFlow,
) -> APIRouter:
    """Return the router serving the account pages."""

    router = APIRouter(include_in_schema=False)

    def _render_register(request: Request, **context):
        context.setdefault("fields", registration.fields)
        context.setdefault("password_min_length", PASSWORD_MIN_LENGTH)
        return templates.TemplateResponse(request, "register.html", context)

    @router.get("/register", response_class=HTMLResponse, name="register")
    async def register_form(request: Request):
        return _render_register(request)

    @router.post("/register", name="process_register")
    async def process_register(
        request: Request,
        user_name: str = Form(""),
        user_pass: str = Form(""),
        user_email: str = Form(""),
        first_name: str = Form(""),
        last_name: str = Form(""),
    ):
        blocked = gate.require_no_session(request)
        if blocked is not None:
            return blocked

        form = RegistrationForm.from_mapping(
            {
                "user_name": user_name,
                "user_pass": user_pass,
                "user_email": user_email,
                "first_name": first_name,
                "last_name": last_name,
            }
        )
        try:
            await registration.register(form)
        except ValidationError as exc:
            return _render_register(request, register_error=exc.messages, old_data=exc.old_data)

        return RedirectResponse(request.url_for("login"), status_code=status.HTTP_302_FOUND)

    @router.get("/login", response_class=HTMLResponse, name="login")
    async def login_form(request: Request):
        blocked = gate.require_no_session(request)
        if blocked is not None:
            return blocked
        return templates.TemplateResponse(request, "login.html", {})

    @router.post("/login", name="process_login")
    async def process_login(
        request: Request,
        user_email: str = Form(""),
        user_pass: str = Form(""),
    ):
        blocked = gate.require_no_session(request)
        if blocked is not None:
            return blocked

        form = LoginForm.from_mapping({"user_email": user_email, "user_pass": user_pass})
        try:
            user_id = await login.authenticate(form)
        except ValidationError as exc:
            return templates.TemplateResponse(request, "login.html", {"login_errors": exc.messages})
        except AuthenticationError as exc:
            return templates.TemplateResponse(request, "login.html", {"login_errors": [exc.message]})

        sessions.issue(request, user_id)
        return RedirectResponse(request.url_for(LANDING_ROUTE), status_code=status.HTTP_302_FOUND)

    @router.get("/logout", name="logout")
    async def logout(request: Request):
        sessions.clear(request)
        return RedirectResponse(request.url_for("register"), status_code=status.HTTP_302_FOUND)

    @router.get("/main", response_class=HTMLResponse, name=LANDING_ROUTE)
    async def main_page(request: Request):
        blocked = gate.require_session(request)
        if blocked is not None:
            return blocked

        payload = sessions.read(request)
        user = await anyio.to_thread.run_sync(database.get_user, payload.user_id)
        name = user.name if user is not None else GUEST_NAME
        return templates.TemplateResponse(request, "main.html", {"name": name})

    @router.get("/profile", response_class=HTMLResponse, name="profile")
    async def profile(request: Request):
        blocked = gate.require_session(request)
        if blocked is not None:
            return blocked

        payload = sessions.read(request)
        user = await anyio.to_thread.run_sync(database.get_user, payload.user_id)
        if user is None:
            logger.warning("Session references missing user #%s", payload.user_id)
            return templates.TemplateResponse(request, "profile.html", {"name": GUEST_NAME})
        return templates.TemplateResponse(
            request,
            "profile.html",
            {
                "name": user.name,
                "first_name": user.first_name,
                "last_name": user.last_name,
            },
        )

    return router


__all__ = ["build_auth_router"]
