from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.core.database import Base

if TYPE_CHECKING:
    from catalog.models.book import Book


class User(Base):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(180), unique=True, nullable=False)
    # Stored roles only; ROLE_USER is implied and never persisted.
    roles: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    last_connected_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    books: Mapped[list["Book"]] = relationship(back_populates="created_by")

    def get_roles(self) -> list[str]:
        roles = list(self.roles or [])
        if "ROLE_USER" not in roles:
            roles.append("ROLE_USER")
        return roles

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
