"""
The closed set of account roles and the single capability check.

Every role gate in the API goes through :func:`has_role`; nothing else
compares role strings.
"""

from __future__ import annotations

import enum
from typing import Protocol


class Role(str, enum.Enum):
    ADMIN = "admin"
    DEALER = "dealer"
    SALES = "sales"


#: Roles for which a dealer association is meaningful.
DEALER_SCOPED_ROLES = frozenset({Role.DEALER, Role.SALES})


class _HasRole(Protocol):
    role: Role


def has_role(principal: _HasRole | None, role: Role) -> bool:
    """Return True if *principal* exists and holds exactly *role*."""
    return principal is not None and Role(principal.role) is role
