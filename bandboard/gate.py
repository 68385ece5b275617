"""Route guards that decide whether a request may reach its handler."""

from __future__ import annotations

from typing import Optional

from fastapi import Request, status
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from .sessions import SessionStore

LANDING_ROUTE = "main"


class RouteGate:
    """Session-based guards shared by the auth and landing routes.

    Each guard returns ``None`` when the handler may proceed, or the response
    the handler should return instead. Neither guard mutates the session.
    """

    def __init__(self, sessions: SessionStore, templates: Jinja2Templates) -> None:
        self._sessions = sessions
        self._templates = templates

    def require_session(self, request: Request) -> Optional[Response]:
        # The registration page is rendered in place; the URL stays the same.
        if self._sessions.read(request) is None:
            return self._templates.TemplateResponse(request, "register.html", {})
        return None

    def require_no_session(self, request: Request) -> Optional[Response]:
        if self._sessions.read(request) is not None:
            return RedirectResponse(request.url_for(LANDING_ROUTE), status_code=status.HTTP_302_FOUND)
        return None


__all__ = ["LANDING_ROUTE", "RouteGate"]
