from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, ForeignKeyConstraint, Integer, String, Text, UniqueConstraint


version = "20250301093015"
description = "Create user, editor and book tables"


def upgrade(op) -> None:
    op.create_table(
        "user",
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("email", String(180), nullable=False),
        Column("roles", JSON, nullable=False),
        Column("password", String(255), nullable=False),
        Column("last_connected_at", DateTime, nullable=True),
        Column("created_at", DateTime, nullable=False),
        UniqueConstraint("email", name="uniq_user_email"),
    )
    op.create_table(
        "editor",
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("name", String(255), nullable=False),
        Column("created_at", DateTime, nullable=False),
    )
    op.create_table(
        "book",
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("editor_id", Integer, nullable=False),
        Column("created_by_id", Integer, nullable=True),
        Column("title", String(255), nullable=False),
        Column("isbn", String(255), nullable=False),
        Column("cover", String(255), nullable=False),
        Column("edited_at", DateTime, nullable=False),
        Column("plot", Text, nullable=False),
        Column("page_number", Integer, nullable=False),
        Column("status", String(255), nullable=False),
        ForeignKeyConstraint(["editor_id"], ["editor.id"], name="fk_book_editor"),
    )
    op.create_index("idx_book_editor", "book", ["editor_id"])


def downgrade(op) -> None:
    op.drop_table("book")
    op.drop_table("editor")
    op.drop_table("user")
