"""Interactive login event and its listeners.

Listeners are registered explicitly in ``LOGIN_LISTENERS`` and run in that
order by :func:`dispatch_interactive_login`. A failing listener stops the
dispatch and its exception reaches the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Tuple

from sqlalchemy.orm import Session

from catalog.core.database import transaction
from catalog.models import User


logger = logging.getLogger(__name__)


@dataclass
class InteractiveLoginEvent:
    user: User
    occurred_at: datetime = field(default_factory=datetime.utcnow)


LoginListener = Callable[[Session, InteractiveLoginEvent], None]


def stamp_last_connected_at(db: Session, event: InteractiveLoginEvent) -> None:
    user = event.user
    if not isinstance(user, User):
        return
    now = event.occurred_at
    # Timestamps must strictly increase across logins.
    if user.last_connected_at is not None and now <= user.last_connected_at:
        now = user.last_connected_at + timedelta(microseconds=1)
    with transaction(db):
        user.last_connected_at = now
    logger.info("User %s connected at %s", user.id, now.isoformat())


LOGIN_LISTENERS: Tuple[LoginListener, ...] = (stamp_last_connected_at,)


def dispatch_interactive_login(
    db: Session,
    event: InteractiveLoginEvent,
    listeners: Tuple[LoginListener, ...] = LOGIN_LISTENERS,
) -> InteractiveLoginEvent:
    for listener in listeners:
        listener(db, event)
    return event
