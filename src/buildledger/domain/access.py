"""Role checks for an already authenticated principal."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from buildledger.domain.errors import ForbiddenError, UnauthorizedError


class Role(str, Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    USER = "User"


LEDGER_WRITERS = (Role.ADMIN, Role.MANAGER)


@dataclass(frozen=True)
class Principal:
    """Caller identity handed over by the authentication layer."""

    username: str
    role: Role


def require_principal(principal: Optional[Principal]) -> Principal:
    """Raise UnauthorizedError when no principal is present."""
    if principal is None:
        raise UnauthorizedError("User not authenticated")
    return principal


def require_role(principal: Optional[Principal], *allowed: Role) -> Principal:
    """Ensure the principal holds one of the allowed roles.

    Raises:
        UnauthorizedError: If principal is None
        ForbiddenError: If the principal's role is not allowed
    """
    principal = require_principal(principal)
    if principal.role not in allowed:
        required = ", ".join(role.value for role in allowed)
        raise ForbiddenError(
            f"Access denied. Role '{principal.role.value}' is not one of: {required}"
        )
    return principal
