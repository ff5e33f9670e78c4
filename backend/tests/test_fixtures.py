from __future__ import annotations

import random

from catalog.core.schemas import BookForm, isbn13_checksum
from catalog.core.statuses import CommentStatus
from catalog.fixtures import BookFactory, CommentFactory, load_fixtures
from catalog.fixtures.factories import random_isbn13
from catalog.fixtures.load import FixtureCounts
from catalog.models import Author, Book, Editor, User
from catalog.repositories import AuthorRepository, BookRepository, EditorRepository, UserRepository


def test_random_isbn_is_valid():
    rng = random.Random(3)
    for _ in range(20):
        isbn = random_isbn13(rng)
        assert len(isbn) == 13
        assert int(isbn[-1]) == isbn13_checksum(isbn)


def test_book_factory_creates_relations(db):
    book = BookFactory(db, random.Random(1)).create()
    assert isinstance(book.author, Author)
    assert isinstance(book.editor, Editor)
    assert isinstance(book.created_by, User)
    assert book.id is not None


def test_overrides_skip_defaults(db, factories):
    author = factories.authors.create()
    factories.books.create_many(3, author=author)
    assert AuthorRepository(db).count() == 1


def test_factory_books_pass_form_validation(db, factories):
    book = factories.books.create()
    form = BookForm(
        title=book.title,
        isbn=book.isbn,
        cover=book.cover,
        edited_at=book.edited_at,
        plot=book.plot,
        page_number=book.page_number,
        status=book.status,
        author_id=book.author_id,
        editor_id=book.editor_id,
    )
    assert form.isbn == book.isbn


def test_published_comments_have_publication_date(db):
    factory = CommentFactory(db, random.Random(5))
    published = factory.create(status=CommentStatus.PUBLISHED)
    pending = factory.create(status=CommentStatus.PENDING, book=published.book)
    assert published.published_at > published.created_at
    assert pending.published_at is None


def test_load_fixtures(db):
    counts = FixtureCounts(authors=5, editors=3, users=2, books=12)
    load_fixtures(db, counts, seed=42)

    assert AuthorRepository(db).count() == 5
    assert EditorRepository(db).count() == 3
    assert UserRepository(db).count() == 2
    assert BookRepository(db).count() == 12
    # books only reference the loaded rows
    assert {book.created_by_id for book in db.query(Book)} <= {user.id for user in db.query(User)}
