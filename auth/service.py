"""
auth/service.py -- Registration, credential checks, and session issuance.

The JSON API (api/routes/v1/auth.py) and the HTML UI (web/routes.py) both call
these functions so the two surfaces cannot drift apart on validation rules or
on the failure-collapsing policy:

  - authenticate_user() answers None for an unknown username, a wrong
    password, and a corrupt stored hash alike. It always runs one Argon2
    verification so response time does not reveal which case happened.
  - register_account() raises RegistrationError with a stable code and a
    user-facing message. Store failures are NOT wrapped; they propagate as
    SQLAlchemyError for the caller to log and genericize.

Argon2 is deliberately slow. Call these from sync route handlers (plain def)
so FastAPI runs them in its worker threadpool, not on the event loop.

Layer rule: no imports from api/, web/, or items/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import Account, SessionClaim
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import UserStore
from auth.tokens import create_session_token, new_session_claim

logger = logging.getLogger("itemkeeper.auth")

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 6


class RegistrationError(Exception):
    """A registration form was rejected. message is safe to show the user."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def validate_registration(username: str, email: str, password: str, confirm_password: str) -> None:
    """Raise RegistrationError for the first rule the form breaks."""
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise RegistrationError(
            "invalid_username",
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters.",
        )
    if "@" not in email or len(email) > EMAIL_MAX_LENGTH or email.startswith("@") or email.endswith("@"):
        raise RegistrationError("invalid_email", "Please enter a valid email address.")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise RegistrationError(
            "password_too_short",
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters.",
        )
    if password != confirm_password:
        raise RegistrationError("passwords_mismatch", "Passwords do not match.")


def register_account(
    store: UserStore,
    username: str,
    email: str,
    password: str,
    confirm_password: str,
) -> Account:
    """Validate the form, hash the password, and create the account.

    username and email are whitespace-trimmed before validation. The
    username_exists()/email_exists() checks give friendly messages; the UNIQUE
    constraints catch the race where two requests pass those checks together.
    """
    username = username.strip()
    email = email.strip()
    validate_registration(username, email, password, confirm_password)

    if store.username_exists(username):
        raise RegistrationError("username_taken", "Username is already taken.")
    if store.email_exists(email):
        raise RegistrationError("email_taken", "Email is already registered.")

    try:
        account = store.create_account(username, email, hash_password(password))
    except IntegrityError as exc:
        raise RegistrationError("account_exists", "Username or email is already registered.") from exc

    logger.info("Registered account id=%s username=%s", account.id, account.username)
    return account


def authenticate_user(store: UserStore, username: str, password: str) -> Account | None:
    """Check a username/password pair with timing equalization.

    Always runs Argon2 whether or not the user exists:
    - Unknown username: verify against DUMMY_HASH (same cost as a real check)
    - Wrong password / corrupt hash: verify against the stored value

    The username is whitespace-trimmed the same way register_account() trims it.
    Returns the Account on success, None on any failure.
    """
    account = store.get_by_username(username.strip())
    if account is None:
        verify_password(password, DUMMY_HASH)
        logger.info("Failed login attempt (bad credentials)")
        return None
    if not verify_password(password, account.password_hash):
        logger.info("Failed login attempt (bad credentials)")
        return None
    return account


def issue_session(account: Account, secret_key: str, lifetime_seconds: int) -> tuple[str, SessionClaim]:
    """Create a signed session token for a freshly authenticated account."""
    claim = new_session_claim(account.id, account.username, lifetime_seconds)
    token = create_session_token(claim, secret_key)
    logger.info("Issued session for account id=%s", account.id)
    return token, claim
