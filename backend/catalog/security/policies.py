"""Authorization policies.

Every policy answers one question for a ``(principal, resource, action)``
triple with ``ALLOW``, ``DENY`` or ``ABSTAIN``. A policy abstains when the
action or resource is outside its concern; combining the answers is the job
of :class:`catalog.security.access.AccessDecisionManager`.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Protocol, Tuple

from catalog.models import Book, User
from catalog.security.roles import IS_AUTHENTICATED, ROLE_HIERARCHY, reachable_roles


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    ABSTAIN = "abstain"


class AuthorizationPolicy(Protocol):
    def evaluate(self, principal: Optional[User], resource: Any, action: str) -> Decision: ...


class AuthenticatedPolicy:
    """Votes on ``IS_AUTHENTICATED`` only."""

    def evaluate(self, principal: Optional[User], resource: Any, action: str) -> Decision:
        if action != IS_AUTHENTICATED:
            return Decision.ABSTAIN
        return Decision.ALLOW if isinstance(principal, User) else Decision.DENY


class RolePolicy:
    """Votes on ``ROLE_*`` actions using the principal's roles and the hierarchy."""

    prefix = "ROLE_"

    def __init__(self, hierarchy: Dict[str, Tuple[str, ...]] | None = None) -> None:
        self.hierarchy = ROLE_HIERARCHY if hierarchy is None else hierarchy

    def evaluate(self, principal: Optional[User], resource: Any, action: str) -> Decision:
        if not action.startswith(self.prefix):
            return Decision.ABSTAIN
        if not isinstance(principal, User):
            return Decision.DENY
        roles = reachable_roles(principal.get_roles(), self.hierarchy)
        return Decision.ALLOW if action in roles else Decision.DENY


class BookCreatorPolicy:
    """Allows ``book.is_creator`` when the principal created the book.

    The creator is compared by identifier, so two ``User`` instances loaded
    from different sessions for the same row are the same creator.
    """

    IS_CREATOR = "book.is_creator"

    def evaluate(self, principal: Optional[User], resource: Any, action: str) -> Decision:
        if action != self.IS_CREATOR or not isinstance(resource, Book):
            return Decision.ABSTAIN
        if not isinstance(principal, User) or principal.id is None:
            return Decision.DENY
        creator = resource.created_by
        if creator is None or creator.id is None:
            return Decision.DENY
        return Decision.ALLOW if creator.id == principal.id else Decision.DENY
