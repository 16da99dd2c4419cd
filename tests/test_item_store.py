"""Unit tests for items/store.py -- the owner-scoped item repository.

Covers:
- Owner can read, update, delete their item
- Another account's get/update/delete returns the same "nothing" as a
  nonexistent id, and leaves the row untouched
- list_items() only returns the caller's items
- update refreshes updated_at
- Deleting an account cascades to its items
"""

import pytest

import items.store as items_store_module
from items.models import ItemValidationError, normalize_item_input


@pytest.fixture
def owners(make_account):
    return make_account("alice"), make_account("bob")


class TestOwnershipGuard:
    def test_owner_can_get(self, item_store, owners):
        alice, _bob = owners
        item = item_store.create_item(alice.id, "Groceries", "milk")
        fetched = item_store.get_item(item.id, alice.id)
        assert fetched == item

    def test_other_owner_get_is_none(self, item_store, owners):
        alice, bob = owners
        item = item_store.create_item(alice.id, "Groceries", "milk")
        assert item_store.get_item(item.id, bob.id) is None

    def test_other_owner_update_is_none_and_row_unchanged(self, item_store, owners):
        alice, bob = owners
        item = item_store.create_item(alice.id, "Groceries", "milk")
        assert item_store.update_item(item.id, bob.id, "Hijacked", None) is None
        assert item_store.get_item(item.id, alice.id) == item

    def test_other_owner_delete_is_false_and_row_kept(self, item_store, owners):
        alice, bob = owners
        item = item_store.create_item(alice.id, "Groceries", "milk")
        assert item_store.delete_item(item.id, bob.id) is False
        assert item_store.get_item(item.id, alice.id) is not None

    def test_foreign_and_missing_ids_are_indistinguishable(self, item_store, owners):
        alice, bob = owners
        item = item_store.create_item(alice.id, "Groceries")
        missing_id = item.id + 1000
        assert item_store.get_item(item.id, bob.id) == item_store.get_item(missing_id, bob.id)
        assert item_store.update_item(item.id, bob.id, "x") == item_store.update_item(missing_id, bob.id, "x")
        assert item_store.delete_item(item.id, bob.id) == item_store.delete_item(missing_id, bob.id)

    def test_owner_can_update(self, item_store, owners, monkeypatch):
        alice, _bob = owners
        monkeypatch.setattr(items_store_module, "_now_iso", lambda: "2026-01-01T00:00:00+00:00")
        item = item_store.create_item(alice.id, "Groceries", "milk")
        monkeypatch.setattr(items_store_module, "_now_iso", lambda: "2026-01-02T00:00:00+00:00")

        updated = item_store.update_item(item.id, alice.id, "Shopping", None)

        assert updated is not None
        assert updated.title == "Shopping"
        assert updated.description is None
        assert updated.created_at == "2026-01-01T00:00:00+00:00"
        assert updated.updated_at == "2026-01-02T00:00:00+00:00"
        assert item_store.get_item(item.id, alice.id) == updated

    def test_owner_can_delete(self, item_store, owners):
        alice, _bob = owners
        item = item_store.create_item(alice.id, "Groceries")
        assert item_store.delete_item(item.id, alice.id) is True
        assert item_store.get_item(item.id, alice.id) is None
        assert item_store.delete_item(item.id, alice.id) is False


class TestListing:
    def test_list_is_scoped_to_owner(self, item_store, owners):
        alice, bob = owners
        item_store.create_item(alice.id, "A1")
        item_store.create_item(alice.id, "A2")
        item_store.create_item(bob.id, "B1")

        assert sorted(i.title for i in item_store.list_items(alice.id)) == ["A1", "A2"]
        assert [i.title for i in item_store.list_items(bob.id)] == ["B1"]
        assert all(i.owner_id == alice.id for i in item_store.list_items(alice.id))

    def test_list_empty_for_new_account(self, item_store, owners):
        alice, _bob = owners
        assert item_store.list_items(alice.id) == []


def test_account_delete_cascades_to_items(user_store, item_store, owners):
    alice, bob = owners
    mine = item_store.create_item(alice.id, "A1")
    theirs = item_store.create_item(bob.id, "B1")

    assert user_store.delete_account(alice.id) is True

    assert item_store.list_items(alice.id) == []
    assert item_store.get_item(mine.id, alice.id) is None
    assert item_store.get_item(theirs.id, bob.id) is not None


class TestNormalizeItemInput:
    def test_trims_and_blank_description_becomes_none(self):
        assert normalize_item_input("  Title  ", "   ") == ("Title", None)
        assert normalize_item_input("Title", None) == ("Title", None)
        assert normalize_item_input("Title", " desc ") == ("Title", "desc")

    @pytest.mark.parametrize("title", ["", "   ", "x" * 201])
    def test_bad_titles_rejected(self, title):
        with pytest.raises(ItemValidationError):
            normalize_item_input(title, None)

    def test_long_description_rejected(self):
        with pytest.raises(ItemValidationError):
            normalize_item_input("Title", "d" * 2001)

    def test_title_at_limit_accepted(self):
        assert normalize_item_input("x" * 200, None)[0] == "x" * 200


@pytest.mark.parametrize("item_id", [0, -1, 2**63, 2**64])
def test_out_of_range_ids_are_simply_missing(item_store, owners, item_id):
    alice, _bob = owners
    item_store.create_item(alice.id, "A1")
    assert item_store.get_item(item_id, alice.id) is None
    assert item_store.update_item(item_id, alice.id, "x") is None
    assert item_store.delete_item(item_id, alice.id) is False
    assert [i.title for i in item_store.list_items(alice.id)] == ["A1"]
