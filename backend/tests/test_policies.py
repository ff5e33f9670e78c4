"""Authorization policies and the role hierarchy."""
from __future__ import annotations

from catalog.models import Book, Comment, User
from catalog.security.policies import (
    AuthenticatedPolicy,
    BookCreatorPolicy,
    Decision,
    RolePolicy,
)
from catalog.security.roles import (
    IS_AUTHENTICATED,
    ROLE_ADMIN,
    ROLE_BOOK_CREATE,
    ROLE_BOOK_EDIT,
    ROLE_USER,
    reachable_roles,
)


def _user(user_id: int | None = 1, roles=()) -> User:
    return User(id=user_id, email=f"user{user_id}@example.com", roles=list(roles), password="x")


class TestRoleHierarchy:
    def test_admin_reaches_book_roles(self):
        assert reachable_roles([ROLE_ADMIN]) == {ROLE_ADMIN, ROLE_BOOK_CREATE, ROLE_BOOK_EDIT}

    def test_plain_roles_reach_only_themselves(self):
        assert reachable_roles([ROLE_BOOK_EDIT]) == {ROLE_BOOK_EDIT}

    def test_every_user_has_role_user(self):
        assert ROLE_USER in _user(roles=[]).get_roles()
        assert _user(roles=[ROLE_USER]).get_roles().count(ROLE_USER) == 1


class TestAuthenticatedPolicy:
    def test_allows_users(self):
        assert AuthenticatedPolicy().evaluate(_user(), None, IS_AUTHENTICATED) is Decision.ALLOW

    def test_denies_anonymous(self):
        assert AuthenticatedPolicy().evaluate(None, None, IS_AUTHENTICATED) is Decision.DENY

    def test_abstains_on_other_actions(self):
        assert AuthenticatedPolicy().evaluate(_user(), None, ROLE_ADMIN) is Decision.ABSTAIN


class TestRolePolicy:
    def test_granted_role(self):
        assert RolePolicy().evaluate(_user(roles=[ROLE_BOOK_EDIT]), None, ROLE_BOOK_EDIT) is Decision.ALLOW

    def test_missing_role(self):
        assert RolePolicy().evaluate(_user(roles=[ROLE_BOOK_CREATE]), None, ROLE_BOOK_EDIT) is Decision.DENY

    def test_role_through_hierarchy(self):
        assert RolePolicy().evaluate(_user(roles=[ROLE_ADMIN]), None, ROLE_BOOK_CREATE) is Decision.ALLOW

    def test_custom_hierarchy(self):
        policy = RolePolicy(hierarchy={})
        assert policy.evaluate(_user(roles=[ROLE_ADMIN]), None, ROLE_BOOK_CREATE) is Decision.DENY

    def test_implicit_role_user(self):
        assert RolePolicy().evaluate(_user(), None, ROLE_USER) is Decision.ALLOW

    def test_anonymous_is_denied(self):
        assert RolePolicy().evaluate(None, None, ROLE_USER) is Decision.DENY

    def test_abstains_on_non_role_actions(self):
        assert RolePolicy().evaluate(_user(), None, IS_AUTHENTICATED) is Decision.ABSTAIN


class TestBookCreatorPolicy:
    action = BookCreatorPolicy.IS_CREATOR

    def test_creator_is_allowed(self):
        creator = _user(1)
        book = Book(title="t", created_by=creator)
        assert BookCreatorPolicy().evaluate(creator, book, self.action) is Decision.ALLOW

    def test_same_identifier_other_instance_is_allowed(self):
        book = Book(title="t", created_by=_user(7))
        assert BookCreatorPolicy().evaluate(_user(7), book, self.action) is Decision.ALLOW

    def test_other_user_is_denied(self):
        book = Book(title="t", created_by=_user(1))
        assert BookCreatorPolicy().evaluate(_user(2), book, self.action) is Decision.DENY

    def test_anonymous_is_denied(self):
        book = Book(title="t", created_by=_user(1))
        assert BookCreatorPolicy().evaluate(None, book, self.action) is Decision.DENY

    def test_book_without_creator_is_denied(self):
        assert BookCreatorPolicy().evaluate(_user(1), Book(title="t"), self.action) is Decision.DENY

    def test_unsaved_principal_is_denied(self):
        book = Book(title="t", created_by=_user(None))
        assert BookCreatorPolicy().evaluate(_user(None), book, self.action) is Decision.DENY

    def test_abstains_on_other_resources(self):
        comment = Comment(name="reader")
        assert BookCreatorPolicy().evaluate(_user(1), comment, self.action) is Decision.ABSTAIN
        assert BookCreatorPolicy().evaluate(_user(1), None, self.action) is Decision.ABSTAIN

    def test_abstains_on_other_actions(self):
        book = Book(title="t", created_by=_user(1))
        assert BookCreatorPolicy().evaluate(_user(1), book, "book.edit") is Decision.ABSTAIN
