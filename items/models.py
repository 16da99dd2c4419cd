"""
items/models.py -- Domain dataclass and input normalization for items.

Item is a pure data container. normalize_item_input() holds the validation
rules shared by the JSON API and the HTML forms so both surfaces accept and
reject exactly the same input.
"""

from dataclasses import dataclass
from typing import Optional

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000


@dataclass
class Item:
    """A personal item owned by exactly one account.

    owner_id is the account id of the creator and never changes.
    id is None before the record is written to the database.
    """

    owner_id: int
    title: str
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, refreshed on every update


class ItemValidationError(ValueError):
    """The submitted title/description is unacceptable. str(exc) is safe to show the user."""


def normalize_item_input(title: str, description: Optional[str]) -> tuple[str, Optional[str]]:
    """Trim both fields and apply length rules.

    Returns (title, description) where a blank description becomes None.
    Raises ItemValidationError for an empty or over-long title, or an
    over-long description.
    """
    title = (title or "").strip()
    if not title:
        raise ItemValidationError("Title is required.")
    if len(title) > TITLE_MAX_LENGTH:
        raise ItemValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters.")

    cleaned = (description or "").strip()
    if len(cleaned) > DESCRIPTION_MAX_LENGTH:
        raise ItemValidationError(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters.")
    return title, cleaned or None
