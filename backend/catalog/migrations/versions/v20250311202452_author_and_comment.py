from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKeyConstraint, Integer, String, Text


version = "20250311202452"
description = "Create author and comment tables, link book to its author"


def upgrade(op) -> None:
    op.create_table(
        "author",
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("name", String(255), nullable=False),
        Column("date_of_birth", DateTime, nullable=False),
        Column("date_of_death", DateTime, nullable=True),
        Column("nationality", String(255), nullable=True),
    )
    op.create_table(
        "comment",
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("book_id", Integer, nullable=False),
        Column("name", String(255), nullable=False),
        Column("email", String(255), nullable=False),
        Column("created_at", DateTime, nullable=False),
        Column("published_at", DateTime, nullable=True),
        Column("status", String(255), nullable=False),
        Column("content", Text, nullable=False),
        ForeignKeyConstraint(["book_id"], ["book.id"], name="fk_comment_book"),
    )
    op.create_index("idx_comment_book", "comment", ["book_id"])
    op.add_column("book", Column("authors_id", Integer, nullable=False))
    op.create_foreign_key("fk_book_authors", "book", ["authors_id"], "author", ["id"])
    op.create_index("idx_book_authors", "book", ["authors_id"])


def downgrade(op) -> None:
    op.drop_foreign_key("fk_book_authors", "book")
    op.drop_index("idx_book_authors", "book")
    op.drop_column("book", "authors_id")
    op.drop_table("comment")
    op.drop_table("author")
