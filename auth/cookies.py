"""
auth/cookies.py -- The session cookie that carries the token between browser and server.

Wire format:
  token=<jwt>; Path=/; HttpOnly; SameSite=Strict; Max-Age=<seconds>

httponly=True: page scripts cannot read the cookie (XSS mitigation).
samesite="strict": the browser does not attach the cookie to any cross-site
    request, including top-level navigation -- CSRF mitigation for the
    form-POST routes.
path="/": one cookie covers every route in the app.
max_age: equal to the token lifetime so cookie and claim expire together.
secure: only sent over HTTPS when SECURE_COOKIES=true (set in production).

Logout overwrites the cookie with an empty value and Max-Age=0. There is no
server-side state to delete.

Layer rule: no imports from api/, web/, or items/.
"""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response

COOKIE_NAME = "token"


def extract_session_token(request: Request) -> str | None:
    """Return the raw token from the session cookie, or None if absent or empty."""
    value = request.cookies.get(COOKIE_NAME)
    return value or None


def attach_session_cookie(response: Response, token: str, lifetime_seconds: int, secure: bool = False) -> None:
    """Write the session token as an HttpOnly, SameSite=Strict cookie on the response."""
    response.set_cookie(
        COOKIE_NAME,
        value=token,
        max_age=lifetime_seconds,
        path="/",
        httponly=True,
        samesite="strict",
        secure=secure,
    )


def clear_session_cookie(response: Response, secure: bool = False) -> None:
    """Overwrite the session cookie with an empty, immediately expiring value."""
    response.set_cookie(
        COOKIE_NAME,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        samesite="strict",
        secure=secure,
    )
