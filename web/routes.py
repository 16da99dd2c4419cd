"""
web/routes.py -- Jinja2 template routes for the ItemKeeper web UI.

These routes serve server-rendered HTML. They share app.state with the API
routes (same settings, same stores) but return HTML and redirects instead of
JSON.

Route registration order matters. FastAPI resolves same-level paths in order:
  - GET /items/new must be registered before any /items/{item_id} route or
    FastAPI tries to parse "new" as an item id.

Routes:
  GET  /                     -- home page (identity optional)
  GET  /register             -- registration form
  POST /register             -- create account, redirect /login?registered=true
  GET  /login                -- login form
  POST /login                -- check credentials, set cookie, redirect /items
  POST /logout               -- clear cookie, redirect /
  GET  /items                -- the caller's items (auth required)
  GET  /items/new            -- create form (auth required)
  POST /items                -- create, redirect /items?success=created
  GET  /items/{item_id}/edit -- edit form, or redirect ?error=not_found
  POST /items/{item_id}      -- update, redirect ?success=updated / ?error=not_found
  POST /items/{item_id}/delete -- delete, redirect ?success=deleted / ?error=not_found

Ownership: every item route hands identity.id to ItemStore as the owner key.
"Not yours" and "does not exist" both end at /items?error=not_found.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError

from auth.cookies import attach_session_cookie, clear_session_cookie
from auth.dependencies import try_get_current_identity
from auth.models import Identity
from auth.service import RegistrationError, authenticate_user, issue_session, register_account
from auth.store import UserStore
from core.config import Settings
from items.models import ItemValidationError, normalize_item_input
from items.store import ItemStore

logger = logging.getLogger("itemkeeper.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()

_GENERIC_ERROR = "An error occurred. Please try again."
_BAD_CREDENTIALS = "Invalid username or password."

# Whitelist mappings for ?success= / ?error= query params on /items and
# /login. The raw query param is NEVER passed to templates -- only the message
# from these dicts is. Prevents reflected XSS via crafted query strings.
_ITEM_SUCCESS_MESSAGES: dict[str, str] = {
    "created": "Item created.",
    "updated": "Item updated.",
    "deleted": "Item deleted.",
}
_ITEM_ERROR_MESSAGES: dict[str, str] = {
    "not_found": "Item not found.",
    "database": _GENERIC_ERROR,
}


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def _require_identity(request: Request) -> tuple[Optional[Identity], Optional[RedirectResponse]]:
    """Resolve the caller; return (identity, None) or (None, redirect to /login).

    Call at the top of protected route handlers:
        identity, redirect = _require_identity(request)
        if redirect:
            return redirect
    """
    identity = try_get_current_identity(request)
    if identity is None:
        return None, RedirectResponse("/login", status_code=302)
    return identity, None


def _render(request: Request, name: str, context: dict, status_code: int = 200) -> HTMLResponse:
    return templates.TemplateResponse(request, name, context, status_code=status_code)


# ---------------------------------------------------------------------------
# GET / -- home page
# ---------------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
def home(request: Request) -> HTMLResponse:
    return _render(request, "index.html", {"user": try_get_current_identity(request)})


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


@router.get("/register", response_class=HTMLResponse)
def register_form(request: Request) -> HTMLResponse:
    return _render(request, "auth/register.html", {"user": None})


@router.post("/register", response_class=HTMLResponse)
def register_post(
    request: Request,
    username: str = Form(default=""),
    email: str = Form(default=""),
    password: str = Form(default=""),
    confirm_password: str = Form(default=""),
) -> HTMLResponse:
    """Create an account and send the user to the login page.

    The form is re-rendered (200) with one message on any failure. Submitted
    username and email are echoed back; passwords never are.
    """
    user_store: UserStore = request.app.state.user_store
    context = {"user": None, "username": username, "email": email}
    try:
        register_account(user_store, username, email, password, confirm_password)
    except RegistrationError as exc:
        return _render(request, "auth/register.html", {**context, "error": exc.message})
    except SQLAlchemyError:
        logger.exception("Registration failed: store error")
        return _render(request, "auth/register.html", {**context, "error": _GENERIC_ERROR})
    return RedirectResponse("/login?registered=true", status_code=302)


# ---------------------------------------------------------------------------
# Login / logout
# ---------------------------------------------------------------------------


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request) -> HTMLResponse:
    """Render the login page. ?registered=true adds a confirmation banner."""
    notice = None
    if request.query_params.get("registered") == "true":
        notice = "Registration successful. Please log in."
    return _render(request, "auth/login.html", {"user": None, "notice": notice})


@router.post("/login", response_class=HTMLResponse)
def login_post(
    request: Request,
    username: str = Form(default=""),
    password: str = Form(default=""),
) -> HTMLResponse:
    """Handle username/password login form submission."""
    settings: Settings = request.app.state.settings
    user_store: UserStore = request.app.state.user_store
    context = {"user": None, "username": username}
    try:
        account = authenticate_user(user_store, username, password)
    except SQLAlchemyError:
        logger.exception("Login failed: store error")
        return _render(request, "auth/login.html", {**context, "error": _GENERIC_ERROR})
    if account is None:
        return _render(request, "auth/login.html", {**context, "error": _BAD_CREDENTIALS})

    token, claim = issue_session(account, settings.secret_key, settings.session_lifetime_seconds)
    resp = RedirectResponse("/items", status_code=303)
    attach_session_cookie(resp, token, claim.lifetime_seconds, secure=settings.secure_cookies)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/logout")
def logout(request: Request) -> RedirectResponse:
    """Expire the session cookie and go home."""
    settings: Settings = request.app.state.settings
    resp = RedirectResponse("/", status_code=303)
    clear_session_cookie(resp, secure=settings.secure_cookies)
    return resp


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@router.get("/items", response_class=HTMLResponse)
def items_list(request: Request) -> HTMLResponse:
    identity, redirect = _require_identity(request)
    if redirect:
        return redirect
    item_store: ItemStore = request.app.state.item_store

    error = _ITEM_ERROR_MESSAGES.get(request.query_params.get("error", ""))
    try:
        items = item_store.list_items(identity.id)
    except SQLAlchemyError:
        logger.exception("Failed to load items for user id=%s", identity.id)
        items = []
        error = _GENERIC_ERROR
    return _render(
        request,
        "items/list.html",
        {
            "user": identity,
            "items": items,
            "success": _ITEM_SUCCESS_MESSAGES.get(request.query_params.get("success", "")),
            "error": error,
        },
    )


@router.get("/items/new", response_class=HTMLResponse)
def item_create_form(request: Request) -> HTMLResponse:
    identity, redirect = _require_identity(request)
    if redirect:
        return redirect
    return _render(request, "items/form.html", {"user": identity, "item": None})


@router.post("/items", response_class=HTMLResponse)
def item_create(
    request: Request,
    title: str = Form(default=""),
    description: str = Form(default=""),
) -> HTMLResponse:
    identity, redirect = _require_identity(request)
    if redirect:
        return redirect
    item_store: ItemStore = request.app.state.item_store
    form = {"title": title, "description": description}

    try:
        clean_title, clean_description = normalize_item_input(title, description)
    except ItemValidationError as exc:
        return _render(request, "items/form.html", {"user": identity, "item": None, "form": form, "error": str(exc)})

    try:
        item_store.create_item(identity.id, clean_title, clean_description)
    except SQLAlchemyError:
        logger.exception("Failed to create item for user id=%s", identity.id)
        return _render(
            request,
            "items/form.html",
            {"user": identity, "item": None, "form": form, "error": _GENERIC_ERROR},
        )
    return RedirectResponse("/items?success=created", status_code=302)


@router.get("/items/{item_id}/edit", response_class=HTMLResponse)
def item_edit_form(request: Request, item_id: int) -> HTMLResponse:
    identity, redirect = _require_identity(request)
    if redirect:
        return redirect
    item_store: ItemStore = request.app.state.item_store
    try:
        item = item_store.get_item(item_id, identity.id)
    except SQLAlchemyError:
        logger.exception("Failed to load item id=%s", item_id)
        return RedirectResponse("/items?error=database", status_code=302)
    if item is None:
        return RedirectResponse("/items?error=not_found", status_code=302)
    return _render(request, "items/form.html", {"user": identity, "item": item})


@router.post("/items/{item_id}", response_class=HTMLResponse)
def item_update(
    request: Request,
    item_id: int,
    title: str = Form(default=""),
    description: str = Form(default=""),
) -> HTMLResponse:
    identity, redirect = _require_identity(request)
    if redirect:
        return redirect
    item_store: ItemStore = request.app.state.item_store
    form = {"title": title, "description": description}

    try:
        clean_title, clean_description = normalize_item_input(title, description)
    except ItemValidationError as exc:
        # Only re-render the edit form for an item the caller owns.
        item = item_store.get_item(item_id, identity.id)
        if item is None:
            return RedirectResponse("/items?error=not_found", status_code=302)
        return _render(request, "items/form.html", {"user": identity, "item": item, "form": form, "error": str(exc)})

    try:
        updated = item_store.update_item(item_id, identity.id, clean_title, clean_description)
    except SQLAlchemyError:
        logger.exception("Failed to update item id=%s", item_id)
        return RedirectResponse("/items?error=database", status_code=302)
    if updated is None:
        return RedirectResponse("/items?error=not_found", status_code=302)
    return RedirectResponse("/items?success=updated", status_code=302)


@router.post("/items/{item_id}/delete")
def item_delete(request: Request, item_id: int) -> RedirectResponse:
    identity, redirect = _require_identity(request)
    if redirect:
        return redirect
    item_store: ItemStore = request.app.state.item_store
    try:
        deleted = item_store.delete_item(item_id, identity.id)
    except SQLAlchemyError:
        logger.exception("Failed to delete item id=%s", item_id)
        return RedirectResponse("/items?error=database", status_code=302)
    if not deleted:
        return RedirectResponse("/items?error=not_found", status_code=302)
    return RedirectResponse("/items?success=deleted", status_code=302)
