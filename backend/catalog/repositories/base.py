from __future__ import annotations

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from catalog.core.database import Base


ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Query helpers for one mapped class, bound to a request session."""

    model: Type[ModelT]

    def __init__(self, db: Session) -> None:
        self.db = db

    def find(self, entity_id: int) -> Optional[ModelT]:
        return self.db.get(self.model, entity_id)

    def query(self) -> Select:
        return select(self.model)

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(self.model)) or 0

    def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        return entity

    def remove(self, entity: ModelT) -> None:
        self.db.delete(entity)
