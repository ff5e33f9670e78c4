from catalog.fixtures.factories import (
    AuthorFactory,
    BookFactory,
    CommentFactory,
    EditorFactory,
    ModelFactory,
    UserFactory,
)
from catalog.fixtures.load import load_fixtures

__all__ = [
    "AuthorFactory",
    "BookFactory",
    "CommentFactory",
    "EditorFactory",
    "ModelFactory",
    "UserFactory",
    "load_fixtures",
]
