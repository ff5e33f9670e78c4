from catalog.repositories.author import AuthorRepository
from catalog.repositories.book import BookRepository
from catalog.repositories.comment import CommentRepository
from catalog.repositories.editor import EditorRepository
from catalog.repositories.user import UserRepository

__all__ = [
    "AuthorRepository",
    "BookRepository",
    "CommentRepository",
    "EditorRepository",
    "UserRepository",
]
