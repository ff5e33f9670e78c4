from __future__ import annotations

import pytest

from catalog.core.auth import hash_password, needs_rehash, verify_password
from catalog.models import User
from catalog.repositories import UserRepository
from catalog.security.exceptions import UnsupportedUserError


class NotAUser:
    password = "unchanged"


def test_upgrade_password_rejects_foreign_principals(db):
    principal = NotAUser()
    with pytest.raises(UnsupportedUserError) as excinfo:
        UserRepository(db).upgrade_password(principal, "new-hash")
    assert str(excinfo.value) == 'Instances of "NotAUser" are not supported.'
    assert excinfo.value.user is principal
    assert principal.password == "unchanged"


def test_upgrade_password_persists(db, make_user, session_factory):
    user = make_user()
    UserRepository(db).upgrade_password(user, "new-hash")

    other = session_factory()
    try:
        assert other.get(User, user.id).password == "new-hash"
    finally:
        other.close()


def test_find_by_email_ignores_case(db, make_user):
    user = make_user(email="Reader@Example.com")
    assert UserRepository(db).find_by_email("reader@example.COM").id == user.id
    assert UserRepository(db).find_by_email("nobody@example.com") is None


def test_password_helpers():
    hashed = hash_password("secret", rounds=4)
    assert verify_password("secret", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret", "not-a-bcrypt-hash")
    assert not needs_rehash(hashed)
    assert needs_rehash(hash_password("secret", rounds=5))
    assert needs_rehash("plain")
