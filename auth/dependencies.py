"""
auth/dependencies.py -- Request identity resolution and FastAPI Depends() helpers.

Two carriers are checked in priority order:
  1. Session cookie ("token") -- set by the web UI and API login flows.
  2. Authorization: Bearer <token> header -- API clients holding the JWT.

resolve_identity() is the core: carrier -> token decode -> one account lookup
-> Identity. Every "no" along the way (no cookie, bad signature, expired,
malformed, account deleted since issuance) collapses into None, because an
anonymous visitor is a normal state, not an error. Store failures are the one
thing that propagates: an unavailable database is not evidence that the
caller is anonymous.

try_get_current_identity() is the soft variant (returns None); the web UI uses
it to decide between rendering a page and redirecting to /login.
get_current_identity() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from web/ or items/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.cookies import extract_session_token
from auth.models import Identity
from auth.store import UserStore
from auth.tokens import decode_session_token


def _extract_bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:] or None
    return None


def resolve_identity(request: Request) -> Identity | None:
    """Return the authenticated Identity for this request, or None for anonymous.

    Performs at most one store lookup and has no side effects.
    """
    token = extract_session_token(request) or _extract_bearer_token(request)
    if token is None:
        return None

    secret_key: str = request.app.state.settings.secret_key
    claim = decode_session_token(token, secret_key)
    if claim is None:
        return None

    user_store: UserStore = request.app.state.user_store
    account = user_store.get_by_id(claim.user_id)
    if account is None:
        return None
    return account.to_identity()


def try_get_current_identity(request: Request) -> Identity | None:
    """Soft dependency: the Identity if the request is authenticated, else None. Never raises 401."""
    return resolve_identity(request)


def get_current_identity(request: Request) -> Identity:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    identity = try_get_current_identity(request)
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return identity
