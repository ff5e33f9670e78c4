from __future__ import annotations


version = "20250407115757"
description = "Add the foreign key and index on book.created_by_id"


def upgrade(op) -> None:
    op.create_foreign_key("fk_book_created_by", "book", ["created_by_id"], "user", ["id"])
    op.create_index("idx_book_created_by", "book", ["created_by_id"])


def downgrade(op) -> None:
    op.drop_foreign_key("fk_book_created_by", "book")
    op.drop_index("idx_book_created_by", "book")
