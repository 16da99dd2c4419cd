"""
items/store.py -- SQLAlchemy-backed, owner-scoped persistence for items.

Pattern: Repository + Data Mapper. ItemStore is the repository; _row_to_item
is the mapper. Route handlers never touch SQL directly.

Ownership guard:
  Every single-item operation takes owner_id as a mandatory second key, and
  the one SQL statement that does the work has

      WHERE items.id = :item_id AND items.owner_id = :owner_id

  There is no "fetch by id, then compare owner in Python" path anywhere: the
  check and the read/write are the same statement, so nothing can change in
  between and no code path can forget the comparison.

  "Belongs to someone else" and "does not exist" return the same thing (None
  or False). Callers turn both into a plain not-found, so item ids owned by
  other accounts cannot be probed.

  list_items() and create_item() are scoped by construction -- owner_id is
  the only key they use.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ItemStore(engine)
    item = store.create_item(owner_id, "Groceries", "milk, eggs")
    store.get_item(item.id, owner_id)          # Item
    store.get_item(item.id, other_owner_id)    # None
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.engine import Engine

from core.database import items as _items
from items.models import Item

logger = logging.getLogger("itemkeeper.items")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# SQLite INTEGER is a signed 64-bit value; the driver raises OverflowError
# for anything larger instead of matching no rows.
_MAX_ROW_ID = 2**63 - 1


def _valid_id(item_id: int) -> bool:
    return 0 < item_id <= _MAX_ROW_ID


def _owned(item_id: int, owner_id: int):
    """The combined id + owner predicate used by every single-item statement."""
    return (_items.c.id == item_id) & (_items.c.owner_id == owner_id)


class ItemStore:
    """Repository for Item entities, always keyed by the owning account."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_item(self, owner_id: int, title: str, description: Optional[str] = None) -> Item:
        """Insert a new item owned by owner_id and return it with its ID and timestamps."""
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _items.insert().values(
                    owner_id=owner_id,
                    title=title,
                    description=description,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            item_id = result.inserted_primary_key[0]
        logger.debug("Created item id=%s owner_id=%s", item_id, owner_id)
        return Item(
            id=item_id,
            owner_id=owner_id,
            title=title,
            description=description,
            created_at=now,
            updated_at=now,
        )

    def list_items(self, owner_id: int) -> list[Item]:
        """Return every item owned by owner_id, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _items.select()
                .where(_items.c.owner_id == owner_id)
                .order_by(_items.c.created_at.desc(), _items.c.id.desc())
            ).fetchall()
        return [_row_to_item(r) for r in rows]

    def get_item(self, item_id: int, owner_id: int) -> Optional[Item]:
        """Return the item if it exists AND belongs to owner_id, else None."""
        if not _valid_id(item_id):
            return None
        with self.engine.connect() as conn:
            row = conn.execute(_items.select().where(_owned(item_id, owner_id))).fetchone()
        return _row_to_item(row) if row is not None else None

    def update_item(
        self,
        item_id: int,
        owner_id: int,
        title: str,
        description: Optional[str] = None,
    ) -> Optional[Item]:
        """Replace title/description and refresh updated_at, in one owner-scoped UPDATE.

        Returns the updated Item, or None when no row matched both keys (the
        item is missing or owned by someone else). Nothing is written in the
        None case.
        """
        if not _valid_id(item_id):
            return None
        with self.engine.connect() as conn:
            row = conn.execute(
                _items.update()
                .where(_owned(item_id, owner_id))
                .values(title=title, description=description, updated_at=_now_iso())
                .returning(*_items.c)
            ).fetchone()
            conn.commit()
        return _row_to_item(row) if row is not None else None

    def delete_item(self, item_id: int, owner_id: int) -> bool:
        """Delete the item in one owner-scoped DELETE. True if a row was removed."""
        if not _valid_id(item_id):
            return False
        with self.engine.connect() as conn:
            result = conn.execute(_items.delete().where(_owned(item_id, owner_id)))
            conn.commit()
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_item(row) -> Item:
    return Item(
        id=row.id,
        owner_id=row.owner_id,
        title=row.title,
        description=row.description,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
