from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from catalog.core.statuses import CommentStatus
from catalog.models import Comment
from catalog.repositories.base import Repository


class CommentRepository(Repository[Comment]):
    model = Comment

    def for_book(self, book_id: int, status: Optional[CommentStatus] = CommentStatus.PUBLISHED) -> List[Comment]:
        stmt = select(Comment).where(Comment.book_id == book_id)
        if status is not None:
            stmt = stmt.where(Comment.status == status)
        stmt = stmt.order_by(Comment.created_at.asc(), Comment.id.asc())
        return list(self.db.scalars(stmt))
