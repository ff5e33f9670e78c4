from __future__ import annotations

import os

# Settings are read at import time; point them at a throwaway database.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")

import random
from types import SimpleNamespace
from typing import Dict, Iterable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from catalog.core.database import Base, build_engine, get_db
from catalog.fixtures import AuthorFactory, BookFactory, CommentFactory, EditorFactory, UserFactory
from catalog.main import app
from catalog.models import User


DEFAULT_PASSWORD = "password"


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory) -> Iterator[TestClient]:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def factories(db, rng):
    return SimpleNamespace(
        users=UserFactory(db, rng),
        authors=AuthorFactory(db, rng),
        editors=EditorFactory(db, rng),
        books=BookFactory(db, rng),
        comments=CommentFactory(db, rng),
    )


@pytest.fixture
def make_user(db, factories):
    def _make_user(roles: Iterable[str] = (), email: str | None = None) -> User:
        overrides = {"roles": list(roles)}
        if email is not None:
            overrides["email"] = email
        user = factories.users.create(**overrides)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def login(client):
    def _login(user: User, password: str = DEFAULT_PASSWORD) -> Dict[str, str]:
        response = client.post("/login", json={"email": user.email, "password": password})
        assert response.status_code == 200, response.text
        # authenticate through the header only, so other requests stay anonymous
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
