from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.core.database import Base
from catalog.core.statuses import BookStatus

if TYPE_CHECKING:
    from catalog.models.author import Author
    from catalog.models.comment import Comment
    from catalog.models.editor import Editor
    from catalog.models.user import User


class Book(Base):
    __tablename__ = "book"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[str] = mapped_column(String(255), nullable=False)
    cover: Mapped[str] = mapped_column(String(255), nullable=False)
    edited_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    plot: Mapped[str] = mapped_column(Text, nullable=False)
    page_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[BookStatus] = mapped_column(
        Enum(BookStatus, native_enum=False, length=255, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    editor_id: Mapped[int] = mapped_column(ForeignKey("editor.id"), index=True, nullable=False)
    # Column name kept from the first schema revision.
    author_id: Mapped[int] = mapped_column("authors_id", ForeignKey("author.id"), index=True, nullable=False)
    created_by_id: Mapped[int | None] = mapped_column(ForeignKey("user.id"), index=True, nullable=True)

    author: Mapped["Author"] = relationship(back_populates="books")
    editor: Mapped["Editor"] = relationship(back_populates="books")
    created_by: Mapped["User | None"] = relationship(back_populates="books")
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="book", cascade="all, delete-orphan", order_by="Comment.created_at"
    )
