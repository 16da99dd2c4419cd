"""
tests/test_web_routes.py -- Integration tests for the server-rendered web UI.

These tests run through the real ASGI stack with follow_redirects=False and
assert on Location headers directly -- following the redirect would hide them.

Coverage:
  - Unauthenticated item pages -> 302 /login
  - Register -> 302 /login?registered=true, login banner
  - Login -> 303 /items with the session cookie; bad login re-renders the form
  - Logout -> 303 / with an expired cookie; the old session no longer works
  - Cross-account edit/update/delete -> /items?error=not_found, row untouched
  - ?success= / ?error= are whitelisted, never reflected
"""

from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError


class TestLoginRedirect:
    def test_items_without_session_redirects_to_login(self, client: TestClient) -> None:
        for path in ("/items", "/items/new", "/items/1/edit"):
            resp = client.get(path)
            assert resp.status_code == 302, path
            assert resp.headers["location"] == "/login"

    def test_item_posts_without_session_redirect_to_login(self, client: TestClient) -> None:
        assert client.post("/items", data={"title": "x"}).headers["location"] == "/login"
        assert client.post("/items/1", data={"title": "x"}).headers["location"] == "/login"
        assert client.post("/items/1/delete").headers["location"] == "/login"

    def test_empty_token_cookie_is_anonymous(self, client: TestClient, use_session) -> None:
        use_session("")
        resp = client.get("/items")
        assert resp.status_code == 302
        assert resp.headers["location"] == "/login"

    def test_garbage_token_cookie_is_anonymous(self, client: TestClient, use_session) -> None:
        use_session("abc.def.ghi")
        assert client.get("/items").headers["location"] == "/login"

    def test_home_renders_for_anonymous(self, client: TestClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        assert 'href="/login"' in resp.text


class TestRegisterAndLogin:
    def test_register_redirects_to_login_with_banner(self, client: TestClient, user_store) -> None:
        resp = client.post(
            "/register",
            data={
                "username": "alice",
                "email": "alice@x.com",
                "password": "password123",
                "confirm_password": "password123",
            },
        )
        assert resp.status_code == 302
        assert resp.headers["location"] == "/login?registered=true"
        assert user_store.username_exists("alice")

        banner = client.get("/login?registered=true")
        assert "Registration successful. Please log in." in banner.text

    def test_register_failure_rerenders_form_without_password(self, client: TestClient, user_store) -> None:
        resp = client.post(
            "/register",
            data={
                "username": "alice",
                "email": "alice@x.com",
                "password": "secretpw1",
                "confirm_password": "secretpw2",
            },
        )
        assert resp.status_code == 200
        assert "secretpw1" not in resp.text
        assert not user_store.username_exists("alice")

    def test_login_sets_cookie_and_redirects_to_items(self, client: TestClient, make_account) -> None:
        make_account("alice")
        resp = client.post("/login", data={"username": "alice", "password": "password123"})
        assert resp.status_code == 303
        assert resp.headers["location"] == "/items"
        cookie = resp.headers["set-cookie"].lower()
        assert cookie.startswith("token=")
        assert "httponly" in cookie
        assert "samesite=strict" in cookie
        assert "max-age=86400" in cookie
        assert "path=/" in cookie

        page = client.get("/items")
        assert page.status_code == 200
        assert "alice" in page.text

    def test_bad_login_rerenders_with_single_message(self, client: TestClient, make_account) -> None:
        make_account("alice")
        wrong_pw = client.post("/login", data={"username": "alice", "password": "nope-nope"})
        no_user = client.post("/login", data={"username": "nobody", "password": "nope-nope"})
        for resp in (wrong_pw, no_user):
            assert resp.status_code == 200
            assert "Invalid username or password." in resp.text
            assert "set-cookie" not in resp.headers

    def test_logout_expires_cookie(self, client: TestClient, make_account) -> None:
        make_account("alice")
        client.post("/login", data={"username": "alice", "password": "password123"})
        assert client.get("/items").status_code == 200

        resp = client.post("/logout")
        assert resp.status_code == 303
        assert resp.headers["location"] == "/"
        cookie = resp.headers["set-cookie"].lower()
        assert cookie.startswith("token=")
        assert "max-age=0" in cookie

        assert client.get("/items").headers["location"] == "/login"


class TestItemPages:
    def test_create_and_list(self, client: TestClient, make_account, token_for, use_session, item_store) -> None:
        alice = make_account("alice")
        use_session(token_for(alice))

        resp = client.post("/items", data={"title": "Groceries", "description": "milk"})
        assert resp.status_code == 302
        assert resp.headers["location"] == "/items?success=created"

        page = client.get("/items?success=created")
        assert "Groceries" in page.text
        assert "Item created." in page.text
        assert [i.title for i in item_store.list_items(alice.id)] == ["Groceries"]

    def test_invalid_title_rerenders_form(self, client: TestClient, make_account, token_for, use_session) -> None:
        use_session(token_for(make_account("alice")))
        resp = client.post("/items", data={"title": "   "})
        assert resp.status_code == 200
        assert "<form" in resp.text

    def test_owner_update_and_delete(self, client: TestClient, make_account, token_for, use_session, item_store) -> None:
        alice = make_account("alice")
        item = item_store.create_item(alice.id, "Groceries")
        use_session(token_for(alice))

        assert client.get(f"/items/{item.id}/edit").status_code == 200

        resp = client.post(f"/items/{item.id}", data={"title": "Shopping", "description": ""})
        assert resp.headers["location"] == "/items?success=updated"
        assert item_store.get_item(item.id, alice.id).title == "Shopping"

        resp = client.post(f"/items/{item.id}/delete")
        assert resp.headers["location"] == "/items?success=deleted"
        assert item_store.get_item(item.id, alice.id) is None

    def test_cross_account_access_is_not_found(
        self, client: TestClient, make_account, token_for, use_session, item_store
    ) -> None:
        alice = make_account("alice")
        bob = make_account("bob")
        item = item_store.create_item(alice.id, "Private", "alice only")
        use_session(token_for(bob))

        edit = client.get(f"/items/{item.id}/edit")
        update = client.post(f"/items/{item.id}", data={"title": "Hijacked"})
        invalid_update = client.post(f"/items/{item.id}", data={"title": ""})
        delete = client.post(f"/items/{item.id}/delete")
        missing = client.post(f"/items/{item.id + 1000}/delete")

        for resp in (edit, update, invalid_update, delete, missing):
            assert resp.status_code == 302
            assert resp.headers["location"] == "/items?error=not_found"

        assert item_store.get_item(item.id, alice.id) == item
        assert "Private" not in client.get("/items").text

    def test_query_messages_are_not_reflected(self, client: TestClient, make_account, token_for, use_session) -> None:
        use_session(token_for(make_account("alice")))
        resp = client.get("/items", params={"error": "<script>alert(1)</script>", "success": "pwned"})
        assert resp.status_code == 200
        assert "<script>alert(1)</script>" not in resp.text
        assert "pwned" not in resp.text

    def test_store_error_on_list_shows_generic_message(
        self, client: TestClient, make_account, token_for, use_session, item_store
    ) -> None:
        use_session(token_for(make_account("alice")))
        error = OperationalError("SELECT", {}, Exception("database is locked"))
        with patch.object(item_store, "list_items", side_effect=error):
            resp = client.get("/items")
        assert resp.status_code == 200
        assert "An error occurred. Please try again." in resp.text
        assert "locked" not in resp.text

    def test_store_error_on_delete_redirects_with_database_error(
        self, client: TestClient, make_account, token_for, use_session, item_store
    ) -> None:
        use_session(token_for(make_account("alice")))
        error = OperationalError("DELETE", {}, Exception("database is locked"))
        with patch.object(item_store, "delete_item", side_effect=error):
            resp = client.post("/items/1/delete")
        assert resp.headers["location"] == "/items?error=database"


def test_id_beyond_integer_range_is_not_found(client: TestClient, make_account, token_for, use_session) -> None:
    use_session(token_for(make_account("alice")))
    huge = 2**64
    for resp in (
        client.get(f"/items/{huge}/edit"),
        client.post(f"/items/{huge}", data={"title": "x"}),
        client.post(f"/items/{huge}", data={"title": ""}),
        client.post(f"/items/{huge}/delete"),
    ):
        assert resp.status_code == 302
        assert resp.headers["location"] == "/items?error=not_found"
