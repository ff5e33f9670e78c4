"""Random-data factories for every entity.

``defaults()`` may return callables; they are only invoked for attributes
that are not overridden, so a ``BookFactory`` given an author never creates
one. Overrides may be callables too and are then evaluated per instance.
"""
from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Any, Callable, ClassVar, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from catalog.core.auth import hash_password
from catalog.core.database import Base
from catalog.core.schemas import isbn13_checksum
from catalog.core.statuses import BookStatus, CommentStatus
from catalog.models import Author, Book, Comment, Editor, User


ModelT = TypeVar("ModelT", bound=Base)

_WORDS = (
    "ash", "border", "candle", "winter", "garden", "river", "silent", "shadow",
    "glass", "harbor", "iron", "lantern", "meadow", "north", "orchard", "paper",
    "quiet", "raven", "salt", "thunder", "velvet", "willow", "amber", "stone",
)
_FIRST_NAMES = ("Anne", "Louis", "Marie", "Victor", "Jules", "Colette", "Emile", "Simone", "Albert", "George")
_LAST_NAMES = ("Hugo", "Verne", "Sand", "Zola", "Camus", "Duras", "Proust", "Dumas", "Balzac", "Flaubert")
_NATIONALITIES = ("French", "Belgian", "Swiss", "Canadian", "Senegalese", "Algerian", None)
_EDITOR_SUFFIXES = ("Editions", "Press", "Books", "Publishing")

# shared bcrypt hash so bulk user creation stays fast
_DEFAULT_PASSWORD = "password"
_password_hash_cache: Dict[str, str] = {}


def _hashed_default_password() -> str:
    if _DEFAULT_PASSWORD not in _password_hash_cache:
        _password_hash_cache[_DEFAULT_PASSWORD] = hash_password(_DEFAULT_PASSWORD)
    return _password_hash_cache[_DEFAULT_PASSWORD]


def random_isbn13(rng: random.Random) -> str:
    digits = "978" + "".join(str(rng.randint(0, 9)) for _ in range(9))
    return f"{digits}{isbn13_checksum(digits)}"


def random_datetime(rng: random.Random, start: datetime, end: datetime) -> datetime:
    span = int((end - start).total_seconds())
    return start + timedelta(seconds=rng.randint(0, max(0, span)))


def random_sentence(rng: random.Random, words: int = 4) -> str:
    text = " ".join(rng.choice(_WORDS) for _ in range(words))
    return text[:1].upper() + text[1:] + "."


def random_text(rng: random.Random, max_chars: int = 255) -> str:
    sentences: List[str] = []
    while sum(len(s) + 1 for s in sentences) < max_chars // 2:
        sentences.append(random_sentence(rng, rng.randint(5, 10)))
    return " ".join(sentences)[:max_chars]


class ModelFactory(Generic[ModelT]):
    model: ClassVar[Type[Base]]

    def __init__(self, db: Session, rng: Optional[random.Random] = None) -> None:
        self.db = db
        self.rng = rng or random.Random()

    def defaults(self) -> Dict[str, Any]:
        raise NotImplementedError

    def build(self, **overrides: Any) -> ModelT:
        attrs = self.defaults()
        attrs.update(overrides)
        resolved = {key: value() if callable(value) else value for key, value in attrs.items()}
        return self.model(**resolved)

    def create(self, **overrides: Any) -> ModelT:
        instance = self.build(**overrides)
        self.db.add(instance)
        self.db.flush()
        return instance

    def create_many(self, count: int, **overrides: Any) -> List[ModelT]:
        return [self.create(**overrides) for _ in range(count)]


class UserFactory(ModelFactory[User]):
    model = User

    def defaults(self) -> Dict[str, Any]:
        first = self.rng.choice(_FIRST_NAMES).lower()
        last = self.rng.choice(_LAST_NAMES).lower()
        return {
            "email": f"{first}.{last}.{self.rng.randint(1, 10**6)}@example.com",
            "roles": [],
            "password": _hashed_default_password,
        }


class AuthorFactory(ModelFactory[Author]):
    model = Author

    def defaults(self) -> Dict[str, Any]:
        born = random_datetime(self.rng, datetime(1800, 1, 1), datetime(1990, 12, 31))
        died: Optional[datetime] = None
        if self.rng.random() < 0.5:
            died = born + timedelta(days=self.rng.randint(30 * 365, 90 * 365))
        return {
            "name": f"{self.rng.choice(_FIRST_NAMES)} {self.rng.choice(_LAST_NAMES)}",
            "date_of_birth": born,
            "date_of_death": died,
            "nationality": self.rng.choice(_NATIONALITIES),
        }


class EditorFactory(ModelFactory[Editor]):
    model = Editor

    def defaults(self) -> Dict[str, Any]:
        return {
            "name": f"{self.rng.choice(_WORDS).title()} {self.rng.choice(_EDITOR_SUFFIXES)}",
        }


class BookFactory(ModelFactory[Book]):
    model = Book

    def defaults(self) -> Dict[str, Any]:
        number = self.rng.randint(1, 10**6)
        return {
            "title": random_sentence(self.rng),
            "isbn": random_isbn13(self.rng),
            "cover": f"https://placehold.co/330x500?text=cover+{number}",
            "edited_at": random_datetime(self.rng, datetime(1950, 1, 1), datetime(2024, 12, 31)),
            "plot": random_text(self.rng, 255),
            "page_number": self.rng.randint(40, 1200),
            "status": self.rng.choice(list(BookStatus)),
            "author": lambda: AuthorFactory(self.db, self.rng).create(),
            "editor": lambda: EditorFactory(self.db, self.rng).create(),
            "created_by": lambda: UserFactory(self.db, self.rng).create(),
        }


class CommentFactory(ModelFactory[Comment]):
    model = Comment

    def defaults(self) -> Dict[str, Any]:
        return {
            "book": lambda: BookFactory(self.db, self.rng).create(),
            "name": self.rng.choice(_FIRST_NAMES),
            "email": f"reader{self.rng.randint(1, 10**6)}@example.com",
            "created_at": random_datetime(self.rng, datetime(2020, 1, 1), datetime(2024, 12, 31)),
            "status": self.rng.choice(list(CommentStatus)),
            "content": random_text(self.rng, 255),
        }

    def build(self, **overrides: Any) -> Comment:
        comment = super().build(**overrides)
        # only published comments carry a publication date
        if "published_at" not in overrides and comment.status is CommentStatus.PUBLISHED:
            comment.published_at = comment.created_at + timedelta(hours=1)
        return comment


def pick(rng: random.Random, rows: List[ModelT]) -> Callable[[], ModelT]:
    return lambda: rng.choice(rows)
