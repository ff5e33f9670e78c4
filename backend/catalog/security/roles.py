from __future__ import annotations

from typing import Dict, Iterable, Set, Tuple


ROLE_USER = "ROLE_USER"
ROLE_BOOK_CREATE = "ROLE_BOOK_CREATE"
ROLE_BOOK_EDIT = "ROLE_BOOK_EDIT"
ROLE_ADMIN = "ROLE_ADMIN"

IS_AUTHENTICATED = "IS_AUTHENTICATED"

# role -> roles it grants in addition to itself
ROLE_HIERARCHY: Dict[str, Tuple[str, ...]] = {
    ROLE_ADMIN: (ROLE_BOOK_CREATE, ROLE_BOOK_EDIT),
}

ASSIGNABLE_ROLES: Tuple[str, ...] = (ROLE_BOOK_CREATE, ROLE_BOOK_EDIT, ROLE_ADMIN)


def reachable_roles(roles: Iterable[str], hierarchy: Dict[str, Tuple[str, ...]] | None = None) -> Set[str]:
    hierarchy = ROLE_HIERARCHY if hierarchy is None else hierarchy
    reached: Set[str] = set()
    pending = list(roles)
    while pending:
        role = pending.pop()
        if role in reached:
            continue
        reached.add(role)
        pending.extend(hierarchy.get(role, ()))
    return reached
