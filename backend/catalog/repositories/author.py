from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import Select

from catalog.models import Author
from catalog.repositories.base import Repository


class AuthorRepository(Repository[Author]):
    model = Author

    def find_by_date_of_birth(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Select:
        """Authors born between ``start`` and ``end``, both inclusive.

        A plain ``date`` bound covers the whole day; a ``datetime`` is used as is.
        """
        stmt = self.query()
        if start is not None:
            if not isinstance(start, datetime):
                start = datetime.combine(start, time.min)
            stmt = stmt.where(Author.date_of_birth >= start)
        if end is not None:
            if isinstance(end, datetime):
                stmt = stmt.where(Author.date_of_birth <= end)
            else:
                stmt = stmt.where(Author.date_of_birth < datetime.combine(end + timedelta(days=1), time.min))
        return stmt.order_by(Author.date_of_birth.asc(), Author.id.asc())
