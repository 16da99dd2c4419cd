"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in items/models.py -- dataclasses own domain shape; stores and routes do the
work.

Layer rule: no imports from api/, web/, or items/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Account:
    """A registered user account as stored in the users table.

    password_hash is an Argon2 PHC string. It must never be copied into an API
    response model or a template context -- convert to Identity first.
    """

    username: str
    email: str
    password_hash: str
    id: int | None = None
    created_at: str | None = None

    def to_identity(self) -> Identity:
        return Identity(id=self.id, username=self.username)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller for a single request. Carries no credentials."""

    id: int
    username: str


@dataclass(frozen=True)
class SessionClaim:
    """Facts asserted by a session token.

    issued_at and expires_at are UNIX timestamps (seconds, UTC). A claim is
    only trusted after the signature verifies and the current time is strictly
    before expires_at.
    """

    user_id: int
    username: str
    issued_at: int
    expires_at: int

    @property
    def lifetime_seconds(self) -> int:
        return self.expires_at - self.issued_at
