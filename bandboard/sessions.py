"""Signed, client-held login sessions for the web interface.

Session content lives entirely in a cookie signed by Starlette's
``SessionMiddleware`` (``itsdangerous`` under the hood). There is no server-side
session table, so logging out only drops the client's copy: a copied cookie
stays valid until the TTL has elapsed since login, or until the secret is
rotated. The TTL is counted from the ``issued_at`` stamp written at login, so
re-signing the cookie on later responses never extends it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware

from .config import DEFAULT_SESSION_MAX_AGE

_LOGGED_IN_KEY = "is_logged_in"
_USER_ID_KEY = "user_id"
_ISSUED_AT_KEY = "issued_at"


@dataclass(frozen=True)
class SessionPayload:
    is_logged_in: bool
    user_id: int
    issued_at: int


class SessionStore:
    """Issue, read and clear the login state carried by the session cookie."""

    def __init__(self, *, ttl_seconds: int = DEFAULT_SESSION_MAX_AGE, cookie_name: str = "session") -> None:
        self._ttl_seconds = ttl_seconds
        self._cookie_name = cookie_name

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    def install(self, app: FastAPI, *, secret_key: str, https_only: bool = False) -> None:
        app.add_middleware(
            SessionMiddleware,
            secret_key=secret_key,
            session_cookie=self._cookie_name,
            max_age=self._ttl_seconds,
            https_only=https_only,
            same_site="lax",
        )

    def issue(self, request: Request, user_id: int) -> None:
        request.session.clear()
        request.session[_LOGGED_IN_KEY] = True
        request.session[_USER_ID_KEY] = user_id
        request.session[_ISSUED_AT_KEY] = int(time.time())

    def read(self, request: Request) -> Optional[SessionPayload]:
        session = request.session
        if not session.get(_LOGGED_IN_KEY):
            return None
        try:
            user_id = int(session.get(_USER_ID_KEY))
            issued_at = int(session.get(_ISSUED_AT_KEY))
        except (TypeError, ValueError):
            return None
        if time.time() - issued_at > self._ttl_seconds:
            return None
        return SessionPayload(is_logged_in=True, user_id=user_id, issued_at=issued_at)

    def clear(self, request: Request) -> None:
        request.session.clear()


__all__ = ["SessionPayload", "SessionStore"]
