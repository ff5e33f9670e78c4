from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select

from catalog.core.database import transaction
from catalog.models import User
from catalog.repositories.base import Repository
from catalog.security.exceptions import UnsupportedUserError


logger = logging.getLogger(__name__)


class UserRepository(Repository[User]):
    model = User

    def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.db.scalars(stmt).first()

    def upgrade_password(self, user: object, new_hashed_password: str) -> None:
        """Store a freshly computed hash for ``user`` and commit it."""
        if not isinstance(user, User):
            raise UnsupportedUserError(user)
        with transaction(self.db):
            user.password = new_hashed_password
            self.db.add(user)
        logger.info("Upgraded password hash for user %s", user.id)
