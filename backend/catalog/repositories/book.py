from __future__ import annotations

from typing import Optional

from sqlalchemy import Select

from catalog.core.statuses import BookStatus
from catalog.models import Book, User
from catalog.repositories.base import Repository


class BookRepository(Repository[Book]):
    model = Book

    def latest(self, status: Optional[BookStatus] = None) -> Select:
        stmt = self.query()
        if status is not None:
            stmt = stmt.where(Book.status == status)
        return stmt.order_by(Book.edited_at.desc(), Book.id.desc())

    def created_by(self, user: User) -> Select:
        return self.query().where(Book.created_by_id == user.id).order_by(Book.id.desc())
