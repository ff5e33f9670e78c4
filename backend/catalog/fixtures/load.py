from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from catalog.core.database import transaction
from catalog.fixtures.factories import AuthorFactory, BookFactory, EditorFactory, UserFactory, pick


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixtureCounts:
    authors: int = 50
    editors: int = 20
    users: int = 5
    books: int = 100


def load_fixtures(db: Session, counts: FixtureCounts = FixtureCounts(), seed: Optional[int] = None) -> FixtureCounts:
    """Populate the catalog with random data.

    Books reference authors, editors and users drawn from the rows created
    here, so every foreign key points at an existing record.
    """
    rng = random.Random(seed)
    with transaction(db):
        authors = AuthorFactory(db, rng).create_many(counts.authors)
        editors = EditorFactory(db, rng).create_many(counts.editors)
        users = UserFactory(db, rng).create_many(counts.users)
        BookFactory(db, rng).create_many(
            counts.books,
            author=pick(rng, authors),
            editor=pick(rng, editors),
            created_by=pick(rng, users),
        )
    logger.info(
        "Loaded fixtures: %d authors, %d editors, %d users, %d books",
        counts.authors,
        counts.editors,
        counts.users,
        counts.books,
    )
    return counts
