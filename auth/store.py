"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper (same as items/store.py).
UserStore is the repository; _row_to_account is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  username and email uniqueness is enforced by UNIQUE constraints, so a
  registration race that slips past username_exists()/email_exists() still
  fails with IntegrityError instead of creating a duplicate.

Failures:
  Store errors (sqlalchemy.exc.SQLAlchemyError) propagate to the caller. They
  are infrastructure failures, not security decisions -- the API and web
  layers log them and answer with a generic "please try again".

Layer rule: no imports from api/, web/, or items/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from auth.models import Account
from core.database import users as _users


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserStore:
    """Repository for Account entities.

    Usage:
        store = UserStore(create_db_engine(url))
        account = store.create_account("alice", "alice@example.com", hash_password("secret"))
        same = store.get_by_username("alice")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_account(self, username: str, email: str, password_hash: str) -> Account:
        """Insert a new account and return it with its assigned ID.

        Raises sqlalchemy.exc.IntegrityError if the username or email already
        exists. Callers should catch IntegrityError as a signal that a
        concurrent registration won the race.
        """
        created_at = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    username=username,
                    email=email,
                    password_hash=password_hash,
                    created_at=created_at,
                )
            )
            conn.commit()
            user_id = result.inserted_primary_key[0]
        return Account(
            id=user_id,
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=created_at,
        )

    def get_by_id(self, user_id: int) -> Account | None:
        """Look up an account by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_by_username(self, username: str) -> Account | None:
        """Look up an account by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_account(row) if row is not None else None

    def username_exists(self, username: str) -> bool:
        with self.engine.connect() as conn:
            count = conn.execute(
                select(func.count()).select_from(_users).where(_users.c.username == username)
            ).scalar()
        return (count or 0) > 0

    def email_exists(self, email: str) -> bool:
        with self.engine.connect() as conn:
            count = conn.execute(select(func.count()).select_from(_users).where(_users.c.email == email)).scalar()
        return (count or 0) > 0

    def delete_account(self, user_id: int) -> bool:
        """Permanently delete an account. Its items go with it (ON DELETE CASCADE).

        Sessions already issued to the account stay cryptographically valid
        until they expire, but the resolver's get_by_id() now returns None, so
        they resolve to anonymous.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
