from catalog.models.user import User
from catalog.models.author import Author
from catalog.models.editor import Editor
from catalog.models.book import Book
from catalog.models.comment import Comment

__all__ = [
    "User",
    "Author",
    "Editor",
    "Book",
    "Comment",
]
