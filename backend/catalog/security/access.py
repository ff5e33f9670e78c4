from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from typing import Any, Optional, Sequence

from fastapi import HTTPException

from catalog.core.config import settings
from catalog.models import User
from catalog.security.policies import (
    AuthenticatedPolicy,
    AuthorizationPolicy,
    BookCreatorPolicy,
    Decision,
    RolePolicy,
)


logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    # first ALLOW wins, otherwise any DENY denies
    AFFIRMATIVE = "affirmative"
    # any DENY denies, otherwise any ALLOW grants
    UNANIMOUS = "unanimous"


class AccessDecisionManager:
    """Evaluates registered policies in order and combines their decisions."""

    def __init__(
        self,
        policies: Sequence[AuthorizationPolicy],
        strategy: Strategy | str = Strategy.AFFIRMATIVE,
        allow_if_all_abstain: bool = False,
    ) -> None:
        self.policies = tuple(policies)
        self.strategy = Strategy(strategy)
        self.allow_if_all_abstain = allow_if_all_abstain

    def decide(self, principal: Optional[User], action: str, resource: Any = None) -> bool:
        if self.strategy is Strategy.AFFIRMATIVE:
            return self._affirmative(principal, action, resource)
        return self._unanimous(principal, action, resource)

    def _affirmative(self, principal: Optional[User], action: str, resource: Any) -> bool:
        denied = False
        for policy in self.policies:
            decision = policy.evaluate(principal, resource, action)
            if decision is Decision.ALLOW:
                return True
            if decision is Decision.DENY:
                denied = True
        if denied:
            return False
        return self.allow_if_all_abstain

    def _unanimous(self, principal: Optional[User], action: str, resource: Any) -> bool:
        allowed = False
        for policy in self.policies:
            decision = policy.evaluate(principal, resource, action)
            if decision is Decision.DENY:
                return False
            if decision is Decision.ALLOW:
                allowed = True
        if allowed:
            return True
        return self.allow_if_all_abstain


def default_policies() -> tuple[AuthorizationPolicy, ...]:
    return (AuthenticatedPolicy(), RolePolicy(), BookCreatorPolicy())


@lru_cache
def get_access_manager() -> AccessDecisionManager:
    return AccessDecisionManager(
        default_policies(),
        strategy=settings.access_decision_strategy,
        allow_if_all_abstain=settings.allow_if_all_abstain,
    )


def deny_access_unless_granted(
    manager: AccessDecisionManager,
    principal: Optional[User],
    action: str,
    resource: Any = None,
) -> None:
    if manager.decide(principal, action, resource):
        return
    if principal is None:
        raise HTTPException(status_code=401, detail="Authentication required.")
    logger.debug("Access denied: user=%s action=%s resource=%r", principal.id, action, resource)
    raise HTTPException(status_code=403, detail="Access denied.")
