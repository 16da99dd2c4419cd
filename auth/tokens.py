"""
auth/tokens.py -- Session token encode / decode.

Security design decisions:
  python-jose with HS256. A session token is a JWT signed with SECRET_KEY and
  carrying the account id (sub), username, issued-at (iat) and expiry (exp).
  There is no server-side session record: the token IS the session.

  Decoding returns None on any failure -- bad signature, undecodable string,
  missing or mistyped claims, exp not after iat, or expiry reached. Callers
  treat None as "anonymous"; nobody downstream needs to know which check
  failed.

  Expiry is strict: a token is rejected once now >= exp, with no leeway for
  clock skew. jose's own exp check tolerates now == exp, so it is disabled and
  the comparison is done here against an injectable clock.

  No revocation: a token stays valid for its whole lifetime. An account
  deleted after issuance is only locked out when the resolver's user lookup
  comes back empty.

The secret is an explicit argument on every call. Request handlers pass
request.app.state.settings.secret_key, which keeps tokens testable against
different keys without patching module state.

Layer rule: no imports from api/, web/, or items/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from jose import JWTError, jwt

from auth.models import SessionClaim

ALGORITHM = "HS256"

_REQUIRED_CLAIMS = ("sub", "username", "iat", "exp")


def _timestamp(now: datetime | None) -> int:
    return int((now or datetime.now(timezone.utc)).timestamp())


def new_session_claim(user_id: int, username: str, lifetime_seconds: int, now: datetime | None = None) -> SessionClaim:
    """Build a claim that expires lifetime_seconds after now."""
    if lifetime_seconds <= 0:
        raise ValueError("lifetime_seconds must be positive")
    issued_at = _timestamp(now)
    return SessionClaim(
        user_id=user_id,
        username=username,
        issued_at=issued_at,
        expires_at=issued_at + lifetime_seconds,
    )


def create_session_token(claim: SessionClaim, secret_key: str) -> str:
    """Encode and sign a claim as a compact, URL-safe JWT string."""
    payload = {
        # jose requires sub to be a string.
        "sub": str(claim.user_id),
        "username": claim.username,
        "iat": claim.issued_at,
        "exp": claim.expires_at,
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_session_token(token: str, secret_key: str, now: datetime | None = None) -> SessionClaim | None:
    """Verify a session token and return its claim, or None if it cannot be trusted."""
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[ALGORITHM],
            # jose turns any require_<claim> option back into a verify, so
            # claim presence is checked below instead.
            options={"verify_exp": False},
        )
    except JWTError:
        return None

    if any(name not in payload for name in _REQUIRED_CLAIMS):
        return None
    try:
        claim = SessionClaim(
            user_id=int(payload["sub"]),
            username=str(payload["username"]),
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )
    except (TypeError, ValueError):
        return None

    if claim.expires_at <= claim.issued_at:
        return None
    if _timestamp(now) >= claim.expires_at:
        return None
    return claim
