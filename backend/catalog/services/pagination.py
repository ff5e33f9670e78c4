"""Offset pagination over SQLAlchemy ``select()`` statements."""
from __future__ import annotations

import math
from functools import cached_property
from typing import Any, Generic, List, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session


T = TypeVar("T")


class OutOfRangePageError(ValueError):
    def __init__(self, page: int, pages: int) -> None:
        super().__init__(f"Page {page} is out of range (1..{pages}).")
        self.page = page
        self.pages = pages


class Pager(Generic[T]):
    """One page of an ORM query.

    ``pages`` is at least 1 so an empty listing still has a first page.
    """

    def __init__(self, db: Session, stmt: Select[Any], page: int = 1, max_per_page: int = 10) -> None:
        if max_per_page < 1:
            raise ValueError("max_per_page must be a positive integer.")
        self.db = db
        self.stmt = stmt
        self.max_per_page = max_per_page
        self.total = self._count()
        self.pages = max(1, math.ceil(self.total / max_per_page))
        if page < 1 or page > self.pages:
            raise OutOfRangePageError(page, self.pages)
        self.page = page

    @classmethod
    def for_current_page(
        cls, db: Session, stmt: Select[Any], page: int, max_per_page: int = 10
    ) -> "Pager[T]":
        return cls(db, stmt, page=page, max_per_page=max_per_page)

    def _count(self) -> int:
        count_stmt = select(func.count()).select_from(self.stmt.order_by(None).subquery())
        return int(self.db.execute(count_stmt).scalar_one())

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @cached_property
    def items(self) -> List[T]:
        offset = (self.page - 1) * self.max_per_page
        rows = self.db.scalars(self.stmt.offset(offset).limit(self.max_per_page))
        return list(rows)
