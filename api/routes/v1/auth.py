"""
api/routes/v1/auth.py -- Registration, login, logout, and identity endpoints.

Routes:
  POST /api/v1/auth/register   -- create an account
  POST /api/v1/auth/login      -- password login; sets session cookie
  POST /api/v1/auth/logout     -- clears the session cookie; 200
  GET  /api/v1/auth/me         -- current identity (requires auth)

Security:
  authenticate_user() provides timing equalization -- use it, never inline
  get_by_username() + verify_password().
  Wrong username and wrong password return the same bad_credentials error.
  Cache-Control: no-store on login responses.

register and login are plain def handlers: Argon2 is slow on purpose, and
FastAPI runs sync handlers in its worker threadpool instead of the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.models import AccountResponse, LoginRequest, LoginResponse, MeResponse, MessageResponse, RegisterRequest
from auth.cookies import attach_session_cookie, clear_session_cookie
from auth.dependencies import get_current_identity
from auth.models import Identity
from auth.service import RegistrationError, authenticate_user, issue_session, register_account
from auth.store import UserStore
from core.config import Settings

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/logout:   public -- clearing a cookie needs no prior auth
# - GET  /api/v1/auth/me:       requires auth (get_current_identity)
router = APIRouter()

_CONFLICT_CODES = {"username_taken", "email_taken", "account_exists"}


@router.post("/auth/register", response_model=AccountResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> AccountResponse:
    """Create a new account. Does not log the caller in."""
    user_store: UserStore = request.app.state.user_store
    try:
        account = register_account(user_store, body.username, body.email, body.password, body.confirm_password)
    except RegistrationError as exc:
        status_code = 409 if exc.code in _CONFLICT_CODES else 400
        raise HTTPException(
            status_code=status_code,
            detail={"code": exc.code, "message": exc.message},
        ) from exc
    return AccountResponse.from_account(account)


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; set the session cookie.

    The token is also returned in the body so non-browser clients can send it
    as a Bearer header.
    """
    settings: Settings = request.app.state.settings
    user_store: UserStore = request.app.state.user_store
    account = authenticate_user(user_store, body.username, body.password)
    if account is None:
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": "Invalid username or password."}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token, claim = issue_session(account, settings.secret_key, settings.session_lifetime_seconds)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=claim.lifetime_seconds,
            username=account.username,
        ).model_dump(),
    )
    attach_session_cookie(resp, token, claim.lifetime_seconds, secure=settings.secure_cookies)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(request: Request) -> JSONResponse:
    """Overwrite the session cookie with an expired, empty value."""
    settings: Settings = request.app.state.settings
    resp = JSONResponse(content=MessageResponse(message="Logged out.").model_dump())
    clear_session_cookie(resp, secure=settings.secure_cookies)
    return resp


@router.get("/auth/me", response_model=MeResponse)
def me(identity: Identity = Depends(get_current_identity)) -> MeResponse:
    """Return the identity attached to the current session."""
    return MeResponse.from_identity(identity)
