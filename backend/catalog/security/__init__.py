from catalog.security.access import (
    AccessDecisionManager,
    Strategy,
    deny_access_unless_granted,
    get_access_manager,
)
from catalog.security.policies import (
    AuthenticatedPolicy,
    AuthorizationPolicy,
    BookCreatorPolicy,
    Decision,
    RolePolicy,
)

__all__ = [
    "AccessDecisionManager",
    "Strategy",
    "deny_access_unless_granted",
    "get_access_manager",
    "AuthenticatedPolicy",
    "AuthorizationPolicy",
    "BookCreatorPolicy",
    "Decision",
    "RolePolicy",
]
