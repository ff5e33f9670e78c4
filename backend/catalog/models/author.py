from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.core.database import Base

if TYPE_CHECKING:
    from catalog.models.book import Book


class Author(Base):
    __tablename__ = "author"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date_of_birth: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    date_of_death: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    nationality: Mapped[str | None] = mapped_column(String(255), nullable=True)

    books: Mapped[list["Book"]] = relationship(back_populates="author")
