from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from catalog import migrations
from catalog.core.database import build_engine


INITIAL = "20250301093015"
AUTHORS = "20250311202452"
CREATED_BY_FK = "20250407115757"


@pytest.fixture
def fresh_engine():
    engine = build_engine("sqlite://")
    yield engine
    engine.dispose()


def _foreign_keys(engine, table):
    return {
        tuple(fk["constrained_columns"]): fk["referred_table"]
        for fk in inspect(engine).get_foreign_keys(table)
    }


def test_discover_orders_versions():
    assert [m.version for m in migrations.discover()] == [INITIAL, AUTHORS, CREATED_BY_FK]


def test_upgrade_builds_schema(fresh_engine):
    assert migrations.upgrade(fresh_engine) == [INITIAL, AUTHORS, CREATED_BY_FK]
    assert migrations.upgrade(fresh_engine) == []

    inspector = inspect(fresh_engine)
    assert {"user", "editor", "book", "author", "comment", "migration_versions"} <= set(inspector.get_table_names())
    assert "authors_id" in {col["name"] for col in inspector.get_columns("book")}
    assert _foreign_keys(fresh_engine, "book") == {
        ("editor_id",): "editor",
        ("authors_id",): "author",
        ("created_by_id",): "user",
    }
    assert _foreign_keys(fresh_engine, "comment") == {("book_id",): "book"}
    indexes = {index["name"] for index in inspector.get_indexes("book")}
    assert {"idx_book_editor", "idx_book_authors", "idx_book_created_by"} <= indexes


def test_upgrade_to_target(fresh_engine):
    assert migrations.upgrade(fresh_engine, target=INITIAL) == [INITIAL]
    assert "author" not in inspect(fresh_engine).get_table_names()
    pending = [m.version for m, executed_at in migrations.status(fresh_engine) if executed_at is None]
    assert pending == [AUTHORS, CREATED_BY_FK]


def test_downgrade_one_step(fresh_engine):
    migrations.upgrade(fresh_engine)
    assert migrations.downgrade(fresh_engine) == [CREATED_BY_FK]
    assert ("created_by_id",) not in _foreign_keys(fresh_engine, "book")
    assert "idx_book_created_by" not in {i["name"] for i in inspect(fresh_engine).get_indexes("book")}


def test_downgrade_everything(fresh_engine):
    migrations.upgrade(fresh_engine)
    assert migrations.downgrade(fresh_engine, target="0") == [CREATED_BY_FK, AUTHORS, INITIAL]
    assert set(inspect(fresh_engine).get_table_names()) == {"migration_versions"}


NOW = "2025-01-01 00:00:00.000000"


def _insert_relations(conn):
    conn.execute(
        text(
            "INSERT INTO user (id, email, roles, password, created_at) "
            "VALUES (1, 'a@example.com', '[]', 'x', :now)"
        ),
        {"now": NOW},
    )
    conn.execute(text("INSERT INTO editor (id, name, created_at) VALUES (1, 'Seuil', :now)"), {"now": NOW})
    conn.execute(text("INSERT INTO author (id, name, date_of_birth) VALUES (1, 'Camus', :now)"), {"now": NOW})


def _insert_book(conn, book_id=1, authors_id=1, created_by_id=1):
    conn.execute(
        text(
            "INSERT INTO book (id, editor_id, created_by_id, title, isbn, cover, edited_at, plot, "
            "page_number, status, authors_id) "
            "VALUES (:id, 1, :created_by_id, 'The Plague', '9780306406157', 'c', :now, 'p', 300, "
            "'available', :authors_id)"
        ),
        {"id": book_id, "created_by_id": created_by_id, "authors_id": authors_id, "now": NOW},
    )


@pytest.mark.parametrize("column", ["authors_id", "created_by_id"])
def test_book_references_are_enforced_on_orm_schema(engine, column):
    with engine.begin() as conn:
        _insert_relations(conn)
    with pytest.raises(IntegrityError):
        with engine.begin() as conn:
            _insert_book(conn, **{column: 999})
    with engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM book")).scalar_one() == 0


@pytest.mark.parametrize("column", ["authors_id", "created_by_id"])
def test_book_references_are_enforced_after_migrations(fresh_engine, column):
    migrations.upgrade(fresh_engine)
    with fresh_engine.begin() as conn:
        _insert_relations(conn)
        _insert_book(conn, book_id=1)
    with pytest.raises(IntegrityError):
        with fresh_engine.begin() as conn:
            _insert_book(conn, book_id=2, **{column: 999})
    with fresh_engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM book")).scalar_one() == 1


def test_rebuild_keeps_rows(fresh_engine):
    migrations.upgrade(fresh_engine, target=AUTHORS)
    with fresh_engine.begin() as conn:
        _insert_relations(conn)
        _insert_book(conn)

    migrations.upgrade(fresh_engine)
    with fresh_engine.connect() as conn:
        row = conn.execute(text("SELECT title, authors_id, created_by_id FROM book")).one()
    assert tuple(row) == ("The Plague", 1, 1)
    assert _foreign_keys(fresh_engine, "book")[("created_by_id",)] == "user"


def test_downgrade_with_unknown_version(fresh_engine):
    migrations.upgrade(fresh_engine)
    with fresh_engine.begin() as conn:
        conn.execute(migrations.migration_versions.insert().values(version="29990101000000", executed_at=datetime.utcnow()))
    with pytest.raises(RuntimeError, match="29990101000000"):
        migrations.downgrade(fresh_engine)
