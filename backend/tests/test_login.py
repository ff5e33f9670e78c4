"""Login, login listeners and logout."""
from __future__ import annotations

from datetime import datetime

import pytest

from catalog.api.routes.security import logout
from catalog.core.auth import decode_access_token, hash_password
from catalog.core.config import settings
from catalog.models import User
from catalog.security.events import (
    InteractiveLoginEvent,
    dispatch_interactive_login,
    stamp_last_connected_at,
)
from catalog.security.exceptions import LogoutNotInterceptedError


def _post_login(client, email, password="password"):
    return client.post("/login", json={"email": email, "password": password})


def test_login_form_is_blank(client):
    response = client.get("/login")
    assert response.status_code == 200
    assert response.json() == {"last_username": None, "error": None}


def test_invalid_credentials(client, make_user):
    user = make_user()
    response = _post_login(client, user.email, "wrong")
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials."
    assert response.json()["last_username"] == user.email


def test_last_username_is_remembered(client):
    _post_login(client, "ghost", "wrong")
    assert client.get("/login").json()["last_username"] == "ghost"


def test_successful_login(client, db, make_user):
    user = make_user(roles=["ROLE_BOOK_EDIT"])
    response = _post_login(client, user.email)
    assert response.status_code == 200

    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == settings.jwt_ttl_seconds
    assert set(body["user"]["roles"]) == {"ROLE_BOOK_EDIT", "ROLE_USER"}
    assert settings.auth_cookie_name in response.cookies

    claims = decode_access_token(body["access_token"])
    assert claims["sub"] == str(user.id)
    assert claims["email"] == user.email


def test_cookie_authenticates_following_requests(client, make_user):
    user = make_user()
    _post_login(client, user.email)
    assert client.get("/admin/author/new").status_code == 200


def test_last_connected_at_strictly_increases(client, db, make_user):
    user = make_user()
    assert user.last_connected_at is None

    _post_login(client, user.email)
    db.expire_all()
    first = db.get(User, user.id).last_connected_at
    assert first is not None

    _post_login(client, user.email)
    db.expire_all()
    assert db.get(User, user.id).last_connected_at > first


def test_password_hash_is_upgraded_on_login(client, db, factories):
    user = factories.users.create(password=hash_password("password", rounds=5))
    db.commit()

    assert _post_login(client, user.email).status_code == 200
    db.expire_all()
    assert db.get(User, user.id).password.startswith(f"$2b${settings.bcrypt_rounds:02d}$")


def test_stamp_ignores_future_timestamps(db, make_user):
    user = make_user()
    future = user.created_at.replace(year=user.created_at.year + 100)
    user.last_connected_at = future
    db.commit()

    stamp_last_connected_at(db, InteractiveLoginEvent(user=user))
    assert user.last_connected_at > future


def test_stamp_uses_event_time(db, make_user):
    user = make_user()
    occurred_at = datetime(2030, 5, 17, 8, 45)

    stamp_last_connected_at(db, InteractiveLoginEvent(user=user, occurred_at=occurred_at))
    assert user.last_connected_at == occurred_at


def test_listener_failure_propagates(db, make_user):
    def broken(db, event):
        raise RuntimeError("listener failed")

    with pytest.raises(RuntimeError, match="listener failed"):
        dispatch_interactive_login(db, InteractiveLoginEvent(user=make_user()), listeners=(broken,))


def test_logout_redirects_and_clears_cookie(client, make_user):
    user = make_user()
    _post_login(client, user.email)

    response = client.get("/logout", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert f"{settings.auth_cookie_name}=" in response.headers["set-cookie"]


def test_logout_route_must_be_intercepted():
    with pytest.raises(LogoutNotInterceptedError):
        logout()
